#! /usr/bin/env python
# -*- coding:utf-8 -*-

"""
Skip-gram training with hierarchical softmax, in plain numpy.

Worker threads call `train_batch_sg` on batches of already-resolved sentences
(lists of `Vocab` objects). The weight tables `model.syn0` / `model.syn1` are
shared between threads and updated in place without any locking.

"""

import logging

from numpy import exp, dot, outer, arange, minimum, float32 as REAL

from gensim.matutils import zeros_aligned

logger = logging.getLogger(__name__)

MAX_EXP = 6.0
EXP_TABLE_SIZE = 1000


def _build_exp_table():
    x = exp((arange(EXP_TABLE_SIZE) / float(EXP_TABLE_SIZE) * 2 - 1) * MAX_EXP)
    table = (x / (x + 1)).astype(REAL)
    table.flags.writeable = False
    return table

# precomputed logistic function over (-MAX_EXP, MAX_EXP), read-only
EXP_TABLE = _build_exp_table()


def train_sg_pair(model, word, context_index, alpha, work=None):
    """
    Update the weights for one (target `word`, context word index) pair.

    Walks the target's Huffman path: every inner node on it gets
    `syn1[point] += g * l1` immediately, while the error for the context
    vector is accumulated in `work` and added to `syn0[context_index]` at the end.
    Nodes whose score falls outside (-MAX_EXP, MAX_EXP) are skipped.

    """
    if work is None:
        work = zeros_aligned(model.layer1_size, dtype=REAL)

    l1 = model.syn0[context_index]  # context word (NN input/projection layer)
    l2a = model.syn1[word.point]  # inner nodes on the target's path (a copy)
    f = dot(l2a, l1)
    live = (f > -MAX_EXP) & (f < MAX_EXP)

    work.fill(0)
    if not live.any():
        return work

    points, codes, l2a = word.point[live], word.code[live], l2a[live]
    fi = ((f[live] + MAX_EXP) * (EXP_TABLE_SIZE / MAX_EXP / 2)).astype(int)
    fa = EXP_TABLE[minimum(fi, EXP_TABLE_SIZE - 1)]
    ga = ((1 - codes - fa) * alpha).astype(REAL)  # (ground_truth - prediction) * learning_rate

    work += dot(ga, l2a)  # save error
    model.syn1[points] += outer(ga, l1)  # update W' (hidden -> output of NN)
    l1 += work  # update W (input -> hidden of NN)
    return work


def train_sentence_sg(model, word_vocabs, alpha, work=None):
    """Train on one resolved sentence. Return the number of positions processed."""
    if work is None:
        work = zeros_aligned(model.layer1_size, dtype=REAL)
    # one reduced window for the whole sentence
    reduced_window = model.random.randint(model.window)
    for pos, word in enumerate(word_vocabs):
        start = max(0, pos - model.window + reduced_window)
        for pos2, word2 in enumerate(word_vocabs[start:(pos + model.window + 1 - reduced_window)],
                                     start):
            # don't train on the `word` itself, nor on words outside the tree
            if pos2 != pos and len(word2.code):
                train_sg_pair(model, word, word2.index, alpha, work)
    return len(word_vocabs)


def train_batch_sg(model, sentences, alpha, work=None):
    """
    Train a batch of sentences, each a list of `Vocab` objects with no
    out-of-vocabulary words left in it. Return the number of words processed.

    """
    result = 0
    for word_vocabs in sentences:
        result += train_sentence_sg(model, word_vocabs, alpha, work)
    return result
