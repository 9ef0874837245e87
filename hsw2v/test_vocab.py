import itertools

import numpy as np
import pytest

from hsw2v.word2vec import (
    RULE_DEFAULT, RULE_DISCARD, RULE_KEEP, Vocab, VocabularyTooSmall, Word2Vec, create_binary_tree,
    keep_vocab_item,
)

# Vocabulary filtering, Huffman tree construction and weight allocation.

SMALL_CORPUS = [["a", "b", "c"], ["b", "c", "d"]]


def _leaves(counts):
    return [Vocab(count=c, index=i) for i, c in enumerate(counts)]


def _min_weighted_path_length(counts):
    """Cheapest tree over all possible merge orders (every full binary tree is reachable)."""
    if len(counts) == 1:
        return 0
    best = None
    for i, j in itertools.combinations(range(len(counts)), 2):
        rest = [c for k, c in enumerate(counts) if k not in (i, j)]
        merged = counts[i] + counts[j]
        cost = merged + _min_weighted_path_length(rest + [merged])
        best = cost if best is None else min(best, cost)
    return best


def test_min_count_boundary():
    sentences = [["x", "x", "y", "y", "y", "z", "z", "z"]]
    model = Word2Vec(size=4, min_count=2)
    model.build_vocab(sentences)
    assert "x" not in model
    assert "y" in model and "z" in model
    assert model.vocab["y"].count == 3


def test_keep_vocab_item_rules():
    assert not keep_vocab_item("w", 5, 5)
    assert keep_vocab_item("w", 6, 5)
    assert keep_vocab_item("w", 1, 5, trim_rule=lambda word, count, min_count: RULE_KEEP)
    assert not keep_vocab_item("w", 9, 5, trim_rule=lambda word, count, min_count: RULE_DISCARD)
    assert keep_vocab_item("w", 9, 5, trim_rule=lambda word, count, min_count: None)
    assert keep_vocab_item("w", 9, 5, trim_rule=lambda word, count, min_count: RULE_DEFAULT)
    assert not keep_vocab_item("w", 5, 5, trim_rule=lambda word, count, min_count: RULE_DEFAULT)


def test_vocab_str():
    assert str(Vocab(count=3, index=1)) == "Vocab(count:3, index:1)"


def test_trim_rule_applied_in_build_vocab():
    def rule(word, count, min_count):
        return RULE_DISCARD if word == "b" else None

    model = Word2Vec(size=4, min_count=0)
    model.build_vocab(SMALL_CORPUS, trim_rule=rule)
    assert sorted(model.vocab) == ["a", "c", "d"]


def test_small_corpus_vocabulary():
    model = Word2Vec(size=4, min_count=0)
    model.build_vocab(SMALL_CORPUS)
    counts = {w: v.count for w, v in model.vocab.items()}
    assert counts == {"a": 1, "b": 2, "c": 2, "d": 1}
    # contiguous indexes, consistent with index2word
    assert sorted(v.index for v in model.vocab.values()) == [0, 1, 2, 3]
    for i, word in enumerate(model.index2word):
        assert model.vocab[word].index == i
    assert model.corpus_count == 2


def test_single_token_corpus_too_small():
    model = Word2Vec(size=4, min_count=0)
    with pytest.raises(VocabularyTooSmall):
        model.build_vocab([["a", "a", "a"], ["a"]])


def test_everything_filtered_too_small():
    model = Word2Vec(size=4, min_count=5)
    with pytest.raises(VocabularyTooSmall):
        model.build_vocab(SMALL_CORPUS)


def test_constructor_rejects_generator():
    with pytest.raises(TypeError):
        Word2Vec((s for s in SMALL_CORPUS), size=4, min_count=0)


def test_constructor_rejects_bad_window():
    with pytest.raises(ValueError):
        Word2Vec(size=4, window=0)


def test_small_corpus_tree():
    model = Word2Vec(size=4, min_count=0)
    model.build_vocab(SMALL_CORPUS)
    n = len(model.vocab)
    assert len(model.tree) == 2 * n - 1
    inner = model.tree[n:]
    assert [node.index for node in inner] == [4, 5, 6]
    for node in inner:
        assert node.left is not None and node.right is not None
    root = inner[-1]
    assert root.count == 6
    for word, v in model.vocab.items():
        assert model.tree[v.index] is v
        assert len(v.code) == len(v.point) > 0
        assert all(0 <= p < n - 1 for p in v.point)
        # every path starts at the root
        assert v.point[0] == root.index - n
    assert model.max_depth == max(len(v.code) for v in model.vocab.values())


def test_tree_node_count_and_prefix_free_codes():
    counts = [5, 1, 1, 2, 3, 8, 13]
    tree, max_depth = create_binary_tree(_leaves(counts))
    n = len(counts)
    assert len(tree) == 2 * n - 1
    codes = [tuple(leaf.code) for leaf in tree[:n]]
    for c1, c2 in itertools.permutations(codes, 2):
        assert c1[:len(c2)] != c2
    for leaf in tree[:n]:
        assert len(leaf.code) == len(leaf.point)
        assert not hasattr(leaf, "left")
    assert max_depth == max(len(c) for c in codes)
    # every inner node is visited by some path
    visited = set(itertools.chain.from_iterable(leaf.point for leaf in tree[:n]))
    assert visited == set(range(n - 1))


@pytest.mark.parametrize("counts", [
    [1, 1, 1, 1],
    [1, 2, 3, 4],
    [10, 1, 1, 1, 1],
    [5, 9, 12, 13, 16],
    [2, 2, 3, 7, 7],
])
def test_tree_is_optimal(counts):
    tree, _ = create_binary_tree(_leaves(counts))
    cost = sum(leaf.count * len(leaf.code) for leaf in tree[:len(counts)])
    assert cost == _min_weighted_path_length(counts)


def test_two_word_tree():
    tree, max_depth = create_binary_tree(_leaves([3, 4]))
    assert max_depth == 1
    assert sorted(tuple(leaf.code) for leaf in tree[:2]) == [(0,), (1,)]
    assert [list(leaf.point) for leaf in tree[:2]] == [[0], [0]]


def test_weight_initialization():
    model = Word2Vec(size=8, min_count=0)
    model.build_vocab(SMALL_CORPUS)
    assert model.syn0.shape == (4, 8)
    assert model.syn1.shape == (3, 8)
    assert model.syn0.dtype == np.float32
    assert np.all(model.syn0 >= -0.5 / 8) and np.all(model.syn0 < 0.5 / 8)
    assert not np.any(model.syn1)
    assert model.syn0norm is None


def test_estimate_memory():
    model = Word2Vec(size=8, min_count=0)
    report = model.estimate_memory(vocab_size=10)
    assert report["syn0"] == 10 * 8 * 4
    assert report["syn1"] == 9 * 8 * 4
    assert report["total"] == report["vocab"] + report["syn0"] + report["syn1"]


def test_failed_rebuild_keeps_model():
    model = Word2Vec(size=8, min_count=0, workers=1)
    model.build_vocab(SMALL_CORPUS)
    index2word, tree = list(model.index2word), list(model.tree)
    syn0, syn1 = model.syn0.copy(), model.syn1.copy()

    with pytest.raises(VocabularyTooSmall):
        model.build_vocab([["x", "x", "x"]])

    assert model.index2word == index2word
    assert sorted(model.vocab) == sorted(index2word)
    assert model.tree == tree
    np.testing.assert_array_equal(model.syn0, syn0)
    np.testing.assert_array_equal(model.syn1, syn1)
    assert model.min_count == 0
    assert model.train(SMALL_CORPUS) == 6
