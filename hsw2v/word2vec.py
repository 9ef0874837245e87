#! /usr/bin/env python
# -*- coding:utf-8 -*-

"""
Learn word vectors with skip-gram and hierarchical softmax, trained by several
threads updating the shared weights without locks ("Hogwild").

    >>> model = Word2Vec(sentences, size=100, window=5, min_count=5, workers=4)
    >>> model.save_word2vec_format('vectors.txt')
    >>> model = Word2Vec.load_word2vec_format('vectors.txt')
    >>> model.most_similar(positive=['woman', 'king'], negative=['man'])

"""

import logging
import sys
import os
import heapq
from timeit import default_timer
from collections import defaultdict
import threading
import itertools
import zlib

from queue import Queue
from types import GeneratorType

import numpy
from numpy import dot, zeros, random, dtype, float32 as REAL, uint32, uint8, sqrt, \
    newaxis, array, empty, frombuffer, ascontiguousarray

import smart_open

from gensim.utils import SaveLoad, to_utf8, to_unicode
from gensim.matutils import unitvec, argsort, zeros_aligned

from hsw2v.word2vec_inner import train_batch_sg

logger = logging.getLogger(__name__)

MAX_WORDS_IN_BATCH = 10000
BATCH_SENTENCES = 800


class VocabularyTooSmall(ValueError):
    """Fewer than two words survived the min_count filter."""


class MalformedFile(ValueError):
    """A vector file could not be read or written."""


class Vocab(object):
    """
    A single vocabulary item, used internally for collecting per-word frequency info,
    and as a node of the Huffman tree (both word leaves and inner nodes).

    Inner nodes reference their children by position in the tree arena, see
    `create_binary_tree()`.

    """
    def __init__(self, **kwargs):
        self.count = 0
        self.__dict__.update(kwargs)

    def __str__(self):
        vals = ['%s:%r' % (key, self.__dict__[key])
                for key in sorted(self.__dict__) if not key.startswith('_')]
        return "%s(%s)" % (self.__class__.__name__, ', '.join(vals))

RULE_DEFAULT = 0
RULE_DISCARD = 1
RULE_KEEP = 2

def keep_vocab_item(word, count, min_count, trim_rule=None):
    """Words occurring exactly `min_count` times are dropped, unless `trim_rule` says otherwise."""
    default_res = count > min_count

    if trim_rule is None:
        return default_res
    else:
        rule_res = trim_rule(word, count, min_count)
        if rule_res == RULE_KEEP:
            return True
        elif rule_res == RULE_DISCARD:
            return False
        else:
            return default_res


def create_binary_tree(leaves):
    """
    Build a Huffman tree over `leaves` (Vocab objects with contiguous `index` 0..n-1).

    Return `(tree, max_depth)`, where `tree` is the node arena: the n leaves at
    positions 0..n-1 followed by the n-1 inner nodes in creation order, so a node's
    `index` is also its position in the arena. Each leaf gets `code` (uint8 bits,
    0 = left) and `point` (uint32 inner node ids, offset by -n), both root-to-leaf.

    """
    n = len(leaves)
    tree = sorted(leaves, key=lambda v: v.index)
    heap = [(v.count, v.index) for v in tree]
    heapq.heapify(heap)
    for i in range(n - 1):
        (count1, min1), (count2, min2) = heapq.heappop(heap), heapq.heappop(heap)
        tree.append(Vocab(count=count1 + count2, index=i + n, left=min1, right=min2))
        heapq.heappush(heap, (count1 + count2, i + n))

    # walk the tree, assigning a binary code to each vocabulary word
    max_depth = 0
    if heap:
        stack = [(heap[0][1], [], [])]
        while stack:
            node_index, codes, points = stack.pop()
            node = tree[node_index]
            if node_index < n:
                # leaf node => store its path from the root
                node.code, node.point = array(codes, dtype=uint8), array(points, dtype=uint32)
                max_depth = max(len(codes), max_depth)
            else:
                # inner node => continue recursion
                points = points + [node_index - n]
                stack.append((node.left, codes + [0], points))
                stack.append((node.right, codes + [1], points))
    return tree, max_depth


def stable_hash(seed_string):
    """Hash a string the same way in every process, unlike the salted builtin `hash()`."""
    return zlib.crc32(to_utf8(seed_string))


def learning_rate(alpha, min_alpha, processed_words, total_words):
    """Linearly decayed learning rate, never below `min_alpha`."""
    return max(min_alpha, alpha * (1.0 - 1.0 * processed_words / total_words))


def qsize(queue):
    """Return the (approximate) queue size where available;"""
    try:
        return queue.qsize()
    except NotImplementedError:
        # OS X doesn't support qsize
        return -1


class Word2Vec(SaveLoad):
    """
    Skip-gram word2vec model trained with hierarchical softmax.

    `syn0` holds one input vector per vocabulary word, `syn1` one output vector per
    inner node of the Huffman tree. `vocab` maps each word to its `Vocab` record and is
    the only owner of them; `index2word` maps row indexes back to words.

    """
    def __init__(
            self, sentences=None, size=100, alpha=0.025, window=5, min_count=5,
            seed=1, workers=3, min_alpha=0.0001, hashfxn=stable_hash, trim_rule=None,
            batch_sentences=BATCH_SENTENCES):
        """
        Initialize the model, and if `sentences` (a re-iterable of lists of unicode
        strings) is given, build the vocabulary and train right away.

        `size` is the dimensionality of the vectors, `window` the maximum distance
        between the target and context words, `min_count` the count a word has to
        exceed to be kept. The learning rate drops linearly from `alpha` to
        `min_alpha` over the training words. `workers` threads train batches of
        `batch_sentences` sentences each.

        """
        self.vocab = {}  # mapping from a word (string) to a Vocab object
        self.index2word = []  # map from a word's matrix index (int) to word (string)
        self.tree = []
        self.max_depth = 0
        self.vector_size = int(size)
        self.layer1_size = int(size)
        if self.vector_size < 1:
            raise ValueError("size must be positive, got %r" % size)
        if size % 4 != 0:
            logger.warning("consider setting layer size to a multiple of 4 for greater performance")
        self.alpha = float(alpha)
        self.window = int(window)
        if self.window < 1:
            raise ValueError("window must be positive, got %r" % window)
        self.seed = seed
        self.random = random.RandomState(seed)
        self.min_count = min_count
        self.workers = int(workers)
        if self.workers < 1:
            raise ValueError("workers must be positive, got %r" % workers)
        self.min_alpha = float(min_alpha)
        self.hashfxn = hashfxn
        self.batch_sentences = int(batch_sentences)
        self.corpus_count = 0
        self.train_count = 0
        self.total_train_time = 0
        self.syn0 = None
        self.syn1 = None
        self.syn0norm = None

        if sentences is not None:
            if isinstance(sentences, GeneratorType):
                raise TypeError("You can't pass a generator as the sentences argument. "
                                "Try an iterator.")
            self.build_vocab(sentences, trim_rule=trim_rule)
            self.train(sentences)

    def build_vocab(self, sentences, trim_rule=None, progress_per=10000):
        """
        Build vocabulary from a sequence of sentences (can be a once-only generator stream).
        Each sentence must be a list of unicode strings.

        Also builds the Huffman tree and allocates the weights; raises
        `VocabularyTooSmall` if fewer than 2 words survive `min_count`.

        """
        self.scan_vocab(sentences, progress_per=progress_per)  # initial survey
        self.scale_vocab(trim_rule=trim_rule)  # trim by min_count
        self.finalize_vocab()  # build tree & arrays

    def scan_vocab(self, sentences, progress_per=10000):
        """Do an initial scan of all words appearing in sentences."""
        logger.info("collecting all words and their counts")
        sentence_no = -1
        vocab = defaultdict(int)
        for sentence_no, sentence in enumerate(sentences):
            if sentence_no == 0 and isinstance(sentence, str):
                logger.warning("Each 'sentence' item should be a list of words (usually unicode strings). "
                               "First item here is instead plain %s.", type(sentence))
            if sentence_no % progress_per == 0:
                logger.info("PROGRESS: at sentence #%i, processed %i words, keeping %i word types",
                            sentence_no, sum(vocab.values()), len(vocab))
            for word in sentence:
                vocab[word] += 1

        logger.info("collected %i word types from a corpus of %i raw words and %i sentences",
                    len(vocab), sum(vocab.values()), sentence_no + 1)
        self.corpus_count = sentence_no + 1
        self.raw_vocab = vocab

    def scale_vocab(self, min_count=None, trim_rule=None):
        """
        Keep the words counted more than `min_count` times, indexed in the order the
        survey met them. Return a report dict of what was dropped and kept.

        """
        if min_count is None:
            min_count = self.min_count
        index2word, vocab = [], {}

        drop_unique, drop_total, retain_total = 0, 0, 0
        for word, v in self.raw_vocab.items():
            if keep_vocab_item(word, v, min_count, trim_rule=trim_rule):
                retain_total += v
                vocab[word] = Vocab(count=v, index=len(index2word))
                index2word.append(word)
            else:
                drop_unique += 1
                drop_total += v
        original_total = retain_total + drop_total
        logger.info("min_count=%d retains %i unique words (drops %i)",
                    min_count, len(vocab), drop_unique)
        logger.info("min_count leaves %i word corpus (%i%% of original %i)",
                    retain_total, retain_total * 100 / max(original_total, 1), original_total)

        # a failed rebuild leaves the current vocabulary, tree and weights in place
        if len(vocab) < 2:
            raise VocabularyTooSmall(
                "min_count=%d leaves %i distinct words; at least 2 are needed to build a tree"
                % (min_count, len(vocab)))

        self.min_count = min_count
        self.index2word, self.vocab = index2word, vocab

        logger.info("deleting the raw counts dictionary of %i items", len(self.raw_vocab))
        self.raw_vocab = defaultdict(int)

        report_values = {'drop_unique': drop_unique, 'retain_total': retain_total}
        report_values['memory'] = self.estimate_memory(vocab_size=len(self.vocab))
        return report_values

    def finalize_vocab(self):
        """Build the Huffman tree and the model weights for the final vocabulary."""
        self.create_binary_tree()
        self.reset_weights()

    def create_binary_tree(self):
        """
        Create a binary Huffman tree using stored vocabulary word counts. Frequent words
        will have shorter binary codes. Called internally from `build_vocab()`.

        """
        logger.info("constructing a huffman tree from %i words", len(self.vocab))
        self.tree, self.max_depth = create_binary_tree(list(self.vocab.values()))
        logger.info("built huffman tree with maximum node depth %i", self.max_depth)

    def reset_weights(self):
        """Reset all projection weights to an initial (untrained) state, but keep the existing vocabulary."""
        logger.info("resetting layer weights")
        self.syn0 = empty((len(self.vocab), self.vector_size), dtype=REAL)
        # randomize weights vector by vector, rather than materializing a huge random matrix in RAM at once
        for i in range(len(self.vocab)):
            # construct deterministic seed from word AND seed argument
            self.syn0[i] = self.seeded_vector(self.index2word[i] + str(self.seed))
        # one row per inner node of the huffman tree
        self.syn1 = zeros((len(self.vocab) - 1, self.layer1_size), dtype=REAL)
        self.syn0norm = None

    def seeded_vector(self, seed_string):
        """Create one 'random' vector (but deterministic by seed_string)"""
        once = random.RandomState(self.hashfxn(seed_string) & 0xffffffff)
        return (once.rand(self.vector_size) - 0.5) / self.vector_size

    def estimate_memory(self, vocab_size=None, report=None):
        """Estimate required memory for a model using current settings and provided vocabulary size"""
        vocab_size = vocab_size or len(self.vocab)
        report = report or {}
        report['vocab'] = vocab_size * 700
        report['syn0'] = vocab_size * self.vector_size * dtype(REAL).itemsize
        report['syn1'] = max(vocab_size - 1, 0) * self.layer1_size * dtype(REAL).itemsize
        report['total'] = sum(report.values())
        logger.info("estimated required memory for %i words and %i dimensions: %i bytes",
                    vocab_size, self.vector_size, report['total'])
        return report

    def train(self, sentences, workers=None, queue_factor=2, report_delay=1.0):
        """
        Update the model's neural weights from a sequence of sentences (can be a once-only
        generator stream). Each sentence must be a list of unicode strings; words outside
        the vocabulary are left out, and sentences with no vocabulary words are skipped.

        The calling thread groups sentences into jobs of `batch_sentences` and feeds them
        through a queue to `workers` threads. Each worker picks its learning rate from the
        shared count of words processed so far. Return the number of words processed.

        """
        if not self.vocab:
            raise RuntimeError("you must first build vocabulary before training the model")
        if self.syn0 is None or self.syn1 is None:
            raise RuntimeError("you must first finalize vocabulary before training the model")

        workers = int(workers or self.workers)
        if workers < 1:
            raise ValueError("workers must be positive, got %r" % workers)

        total_words = sum(v.count for v in self.vocab.values())
        if not total_words:
            raise RuntimeError("no word counts in vocabulary; cannot schedule the learning rate")

        logger.info(
            "training model with %i workers on %i vocabulary and %i features, "
            "alpha %s min_alpha %s", workers, len(self.vocab), self.layer1_size,
            self.alpha, self.min_alpha)

        # shared between threads, updated without a lock
        processed_words = 0
        next_report = report_delay
        failures = []

        def worker_loop():
            """Train the model, lifting lists of sentences from the job_queue."""
            nonlocal processed_words, next_report
            work = zeros_aligned(self.layer1_size, dtype=REAL)  # per-thread private work memory
            jobs_processed = 0
            while True:
                job = job_queue.get()
                if job is None:
                    break  # no more jobs => quit this worker
                if failures:
                    continue  # another worker died; drain the queue so the producer can finish
                alpha = learning_rate(self.alpha, self.min_alpha, processed_words, total_words)
                try:
                    tally = train_batch_sg(self, job, alpha, work)
                except Exception as err:
                    logger.exception("worker thread failed on a job of %i sentences", len(job))
                    failures.append(err)
                    continue
                processed_words += tally
                jobs_processed += 1

                elapsed = default_timer() - start
                if elapsed >= next_report:
                    next_report = elapsed + report_delay
                    logger.info(
                        "PROGRESS: at %.2f%% words, alpha %.05f, %.0f words/s, in_qsize %i",
                        100.0 * processed_words / total_words, alpha,
                        processed_words / elapsed, qsize(job_queue))
            logger.debug("worker exiting, processed %i jobs", jobs_processed)

        # buffer ahead only a limited number of jobs
        job_queue = Queue(maxsize=queue_factor * workers)
        threads = [threading.Thread(target=worker_loop) for _ in range(workers)]
        start = default_timer() - 0.00001
        for thread in threads:
            thread.daemon = True  # make interrupting the process with ctrl+c easier
            thread.start()

        job_no = 0
        try:
            job_batch = []
            for sentence in sentences:
                if failures:
                    break
                word_vocabs = [self.vocab[w] for w in sentence if w in self.vocab]
                if not word_vocabs:
                    continue
                job_batch.append(word_vocabs)
                if len(job_batch) == self.batch_sentences:
                    logger.debug("queueing job #%i (%i sentences)", job_no, len(job_batch))
                    job_queue.put(job_batch)
                    job_no += 1
                    job_batch = []

            # add the last job too (may be significantly smaller than batch_sentences)
            if job_batch and not failures:
                logger.debug("queueing job #%i (%i sentences)", job_no, len(job_batch))
                job_queue.put(job_batch)
                job_no += 1
        finally:
            # give the workers heads up that they can finish -- no more work!
            for _ in range(workers):
                job_queue.put(None)
            for thread in threads:
                thread.join()

        if failures:
            raise failures[0]

        if job_no == 0:
            logger.warning("train() called with a corpus holding no vocabulary words")

        elapsed = default_timer() - start
        logger.info(
            "training on %i effective words (%i jobs) took %.1fs, %.0f effective words/s",
            processed_words, job_no, elapsed, processed_words / elapsed)

        self.train_count += 1  # number of times train() has been called
        self.total_train_time += elapsed
        self.clear_sims()
        return processed_words

    def clear_sims(self):
        self.syn0norm = None

    def init_sims(self, replace=False):
        """
        Precompute L2-normalized vectors. Zero-length vectors are left as they are.

        If `replace` is set, forget the original vectors and only keep the normalized
        ones (saves memory, but the model can't be trained any more).

        """
        if getattr(self, 'syn0norm', None) is None or replace:
            logger.info("precomputing L2-norms of word weight vectors")
            norms = sqrt((self.syn0 ** 2).sum(-1))
            norms[norms == 0] = 1.0
            if replace:
                self.syn0 /= norms[..., newaxis]
                self.syn0norm = self.syn0
                self.syn1 = None
            else:
                self.syn0norm = (self.syn0 / norms[..., newaxis]).astype(REAL)

    def save_word2vec_format(self, fname, fvocab=None, binary=False):
        """
        Store the input weight vectors in the original C word2vec format: a
        `<vocab_size> <size>` header, then one word per line, most frequent first.

        `fvocab` optionally names a file to store `<word> <count>` pairs in.

        """
        words = sorted(self.vocab.items(), key=lambda item: -item[1].count)
        try:
            if fvocab is not None:
                logger.info("storing vocabulary in %s", fvocab)
                with smart_open.open(fvocab, 'wb') as vout:
                    for word, vocab in words:
                        vout.write(to_utf8("%s %s\n" % (word, vocab.count)))
            logger.info("storing %sx%s projection weights into %s",
                        len(self.vocab), self.vector_size, fname)
            assert (len(self.vocab), self.vector_size) == self.syn0.shape
            with smart_open.open(fname, 'wb') as fout:
                fout.write(to_utf8("%s %s\n" % self.syn0.shape))
                for word, vocab in words:
                    row = self.syn0[vocab.index]
                    if binary:
                        fout.write(to_utf8(word) + b" " + row.astype('<f4').tobytes())
                    else:
                        fout.write(to_utf8("%s %s\n" % (
                            word, ' '.join("%g" % val for val in row))))
        except OSError as err:
            raise MalformedFile("cannot write vectors to %s: %s" % (fname, err)) from err

    @classmethod
    def load_word2vec_format(cls, fname, fvocab=None, binary=False, encoding='utf-8',
                             unicode_errors='strict', limit=None):
        """
        Load input weight vectors stored in the C word2vec format (see `save_word2vec_format`).

        Word counts are not part of the format, so every word gets count 0 unless a
        `fvocab` count file is given. The result can be queried but not trained.

        """
        try:
            return cls._load_word2vec_format(
                fname, fvocab=fvocab, binary=binary, encoding=encoding,
                unicode_errors=unicode_errors, limit=limit)
        except OSError as err:
            raise MalformedFile("cannot read vectors from %s: %s" % (fname, err)) from err

    @classmethod
    def _load_word2vec_format(cls, fname, fvocab, binary, encoding, unicode_errors, limit):
        counts = None
        if fvocab is not None:
            logger.info("loading word counts from %s", fvocab)
            counts = {}
            with smart_open.open(fvocab, 'rb') as fin:
                for line_no, line in enumerate(fin):
                    try:
                        word, count = to_unicode(line, encoding=encoding).strip().split()
                        counts[word] = int(count)
                    except ValueError as err:
                        raise MalformedFile("invalid count on line %s of %s" % (line_no, fvocab)) from err

        logger.info("loading projection weights from %s", fname)
        with smart_open.open(fname, 'rb') as fin:
            header = fin.readline()
            try:
                vocab_size, vector_size = map(int, to_unicode(header, encoding=encoding).split())
            except ValueError as err:
                raise MalformedFile("invalid header %r in %s" % (header.strip(), fname)) from err
            if vocab_size < 0 or vector_size < 1:
                raise MalformedFile("invalid header %r in %s" % (header.strip(), fname))
            if limit:
                vocab_size = min(vocab_size, limit)
            result = cls(size=vector_size)
            result.syn0 = zeros((vocab_size, vector_size), dtype=REAL)

            def add_word(word, weights):
                word_id = len(result.vocab)
                if word in result.vocab:
                    logger.warning("duplicate word '%s' in %s, ignoring all but first", word, fname)
                    return
                if counts is None:
                    result.vocab[word] = Vocab(index=word_id, count=0)
                elif word in counts:
                    result.vocab[word] = Vocab(index=word_id, count=counts[word])
                else:
                    logger.warning("vocabulary file is incomplete: '%s' is missing", word)
                    result.vocab[word] = Vocab(index=word_id, count=0)
                result.syn0[word_id] = weights
                result.index2word.append(word)

            if binary:
                binary_len = dtype(REAL).itemsize * vector_size
                for line_no in range(vocab_size):
                    word = []
                    while True:
                        ch = fin.read(1)
                        if ch == b' ':
                            break
                        if ch == b'':
                            raise MalformedFile("unexpected end of input in %s; "
                                                "is count incorrect or file otherwise damaged?" % fname)
                        if ch != b'\n':  # ignore newlines in front of words (some binary files have)
                            word.append(ch)
                    try:
                        word = to_unicode(b''.join(word), encoding=encoding, errors=unicode_errors)
                    except UnicodeDecodeError as err:
                        raise MalformedFile("undecodable word in record %s of %s" % (line_no, fname)) from err
                    raw = fin.read(binary_len)
                    if len(raw) != binary_len:
                        raise MalformedFile("truncated vector for '%s' in %s" % (word, fname))
                    add_word(word, frombuffer(raw, dtype='<f4'))
            else:
                for line_no in range(vocab_size):
                    line = fin.readline()
                    if line == b'':
                        raise MalformedFile("unexpected end of input in %s; "
                                            "is count incorrect or file otherwise damaged" % fname)
                    try:
                        parts = to_unicode(line.rstrip(), encoding=encoding,
                                           errors=unicode_errors).split(" ")
                    except UnicodeDecodeError as err:
                        raise MalformedFile("undecodable text on line %s of %s" % (line_no, fname)) from err
                    if len(parts) != vector_size + 1:
                        raise MalformedFile("invalid vector on line %s of %s "
                                            "(is this really the text format?)" % (line_no, fname))
                    try:
                        weights = [REAL(x) for x in parts[1:]]
                    except ValueError as err:
                        raise MalformedFile("invalid number on line %s of %s" % (line_no, fname)) from err
                    add_word(parts[0], weights)

        if result.syn0.shape[0] != len(result.vocab):
            logger.info(
                "duplicate words detected, shrinking matrix size from %i to %i",
                result.syn0.shape[0], len(result.vocab))
            result.syn0 = ascontiguousarray(result.syn0[: len(result.vocab)])
        assert (len(result.vocab), result.vector_size) == result.syn0.shape

        logger.info("loaded %s matrix from %s", result.syn0.shape, fname)
        result.init_sims()
        return result

    def __str__(self):
        return "%s(vocab=%s, size=%s, alpha=%s)" % (
            self.__class__.__name__, len(self.index2word), self.vector_size, self.alpha)

    def save(self, *args, **kwargs):
        # don't bother storing the cached normalized vectors
        kwargs['ignore'] = kwargs.get('ignore', ['syn0norm'])
        super(Word2Vec, self).save(*args, **kwargs)  # utils.SaveLoad.save()

    save.__doc__ = SaveLoad.save.__doc__

    @classmethod
    def load(cls, *args, **kwargs):
        model = super(Word2Vec, cls).load(*args, **kwargs)
        if not hasattr(model, 'random'):
            model.random = random.RandomState(model.seed)
        return model

    def __contains__(self, word):
        return word in self.vocab

    def __getitem__(self, word):
        """Return the raw input vector of `word`; raise KeyError for unknown words."""
        return self.syn0[self.vocab[word].index]

    def similarity(self, w1, w2):
        """Cosine similarity between two words."""
        return float(dot(unitvec(array(self[w1])), unitvec(array(self[w2]))))

    def most_similar(self, positive=(), negative=(), topn=10):
        """
        Find the top-N most similar words. Positive words contribute positively towards
        the similarity, negative words negatively.

        The unit vectors of the given words are summed (negative ones with weight -1) and
        the cosine between that sum and every vocabulary vector is computed. Words not in
        the vocabulary are ignored. The query words themselves are never returned.

        Return a list of at most `topn` `(word, similarity)` pairs, best first.

        """
        if isinstance(positive, str):
            positive = [positive]
        if isinstance(negative, str):
            negative = [negative]
        if not (positive or negative) or not self.vocab:
            return []
        self.init_sims()

        all_words, mean = set(), zeros(self.vector_size, dtype=REAL)
        for word, weight in [(w, 1.0) for w in positive] + [(w, -1.0) for w in negative]:
            if word in self.vocab:
                mean += REAL(weight) * self.syn0norm[self.vocab[word].index]
                all_words.add(self.vocab[word].index)
        mean = unitvec(mean).astype(REAL)

        dists = dot(self.syn0norm, mean)
        # partial selection of the best candidates, enough to survive dropping the query words
        best = argsort(dists, topn=topn + len(all_words), reverse=True)

        result = [(self.index2word[sim], float(dists[sim]))
                  for sim in best if sim not in all_words]
        return result[:topn]


class LineSentence(object):
    """
    Simple format: one sentence = one line; words already preprocessed and separated by whitespace.
    """

    def __init__(self, source, max_sentence_length=MAX_WORDS_IN_BATCH, limit=None):
        """
        `source` can be either a string (path or URI, compressed files are decompressed
        transparently) or a file object.
        Clip the file to the first `limit` lines (or no clipped if limit is None, the default).

        Example::

            sentences = LineSentence('myfile.txt')
            sentences = LineSentence('compressed_text.txt.gz')

        """
        self.source = source
        self.max_sentence_length = max_sentence_length
        self.limit = limit

    def __iter__(self):
        """Iterate through the lines in the source"""
        try:
            # Assume it is a file-like object and try treating it as such
            # Things that don't have seek will trigger an exception
            self.source.seek(0)
            for sentence in self._split_lines(self.source):
                yield sentence
        except AttributeError:
            # If it didn't work like a file, use it as a string filename
            with smart_open.open(self.source, 'rb') as fin:
                for sentence in self._split_lines(fin):
                    yield sentence

    def _split_lines(self, fin):
        for line in itertools.islice(fin, self.limit):
            line = to_unicode(line).split()
            i = 0
            while i < len(line):
                yield line[i: i + self.max_sentence_length]
                i += self.max_sentence_length


def main(argv=None):
    import argparse
    logging.basicConfig(
        format='%(asctime)s : %(threadName)s : %(levelname)s : %(message)s',
        level=logging.INFO)
    program = os.path.basename(sys.argv[0])
    logging.info("running %s", " ".join(sys.argv))

    parser = argparse.ArgumentParser(prog=program)
    parser.add_argument("-train", help="Use text data from file TRAIN to train the model", required=True)
    parser.add_argument("-output", help="Use file OUTPUT to save the resulting word vectors")
    parser.add_argument("-window", help="Set max skip length WINDOW between words; default is 5", type=int, default=5)
    parser.add_argument("-size", help="Set size of word vectors; default is 100", type=int, default=100)
    parser.add_argument("-alpha", help="Set the starting learning rate; default is 0.025", type=float, default=0.025)
    parser.add_argument("-threads", help="Use THREADS threads (default 12)", type=int, default=12)
    parser.add_argument("-min_count", help="This will discard words that appear MIN_COUNT times or less; default is 5", type=int, default=5)
    parser.add_argument("-binary", help="Save the resulting vectors in binary mode; default is 0 (off)", type=int, default=0, choices=[0, 1])
    parser.add_argument("-query", help="Print the nearest neighbours of these words", nargs="*", default=[])

    args = parser.parse_args(argv)

    corpus = LineSentence(args.train)

    with numpy.errstate(all='raise', under='ignore'):  # don't ignore numpy errors
        model = Word2Vec(
            corpus, size=args.size, alpha=args.alpha, min_count=args.min_count,
            workers=args.threads, window=args.window)

    outfile = args.output or args.train + ('.model.bin' if args.binary else '.model.txt')
    model.save_word2vec_format(outfile, binary=bool(args.binary))

    for word in args.query:
        for other, sim in model.most_similar([word], topn=10):
            print("%s\t%s\t%.4f" % (word, other, sim))

    logger.info("finished running %s", program)


if __name__ == '__main__':
    main()
