from hsw2v.word2vec import (
    LineSentence, MalformedFile, Vocab, VocabularyTooSmall, Word2Vec, create_binary_tree,
    learning_rate,
)

# Skip-gram word2vec with hierarchical softmax, trained by lock-free worker threads.

__all__ = [
    "Word2Vec", "Vocab", "LineSentence", "VocabularyTooSmall", "MalformedFile",
    "create_binary_tree", "learning_rate",
]
