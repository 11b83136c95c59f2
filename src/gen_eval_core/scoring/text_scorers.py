"""
Text-based scoring functions

Implements the computation-based metrics (BLEU-like, ROUGE-1/2/L/L-Sum,
exact match, tool-call accuracy) and the primitives they share.
All scorers return a value in the range 0.0 to 1.0.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Sequence

from gen_eval_core.domain.value_objects import ToolCall


def tokenize(text: str) -> list[str]:
    """
    Split text into tokens

    Lower-cases and splits on whitespace. This is a locale-naive tokenizer,
    not a linguistic one.

    Args:
        text: Text to split

    Returns:
        List of tokens
    """
    return text.lower().split()


def get_bigrams(text: str) -> list[str]:
    """
    Extract adjacent token pairs

    Args:
        text: Text to split

    Returns:
        Bigrams joined with a single space (empty if fewer than 2 tokens)
    """
    words = tokenize(text)
    if len(words) < 2:
        return []
    return [f"{words[i]} {words[i + 1]}" for i in range(len(words) - 1)]


def longest_common_subsequence(seq1: Sequence[str], seq2: Sequence[str]) -> int:
    """
    Length of the longest common subsequence of two token sequences

    Classic O(m*n) dynamic-programming table.

    Args:
        seq1: First token sequence
        seq2: Second token sequence

    Returns:
        LCS length
    """
    m, n = len(seq1), len(seq2)
    dp = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if seq1[i - 1] == seq2[j - 1]:
                dp[i][j] = dp[i - 1][j - 1] + 1
            else:
                dp[i][j] = max(dp[i - 1][j], dp[i][j - 1])

    return dp[m][n]


def compute_bleu_score(candidate: str, reference: str) -> float:
    """
    Simplified single-reference, unigram BLEU

    Unigram precision against the reference vocabulary, multiplied by a
    brevity penalty exp(1 - |ref| / |cand|) when the candidate is shorter.

    Args:
        candidate: Model response
        reference: Ground truth

    Returns:
        BLEU-like score (0.0 when either side is empty)
    """
    cand_words = tokenize(candidate)
    ref_words = tokenize(reference)

    if not cand_words or not ref_words:
        return 0.0

    ref_vocab = set(ref_words)
    matches = sum(1 for word in cand_words if word in ref_vocab)
    precision = matches / len(cand_words)

    brevity_penalty = 1.0
    if len(cand_words) < len(ref_words):
        brevity_penalty = math.exp(1.0 - len(ref_words) / len(cand_words))

    return precision * brevity_penalty


def _clipped_overlap(candidate: list[str], reference: list[str]) -> int:
    """Overlap count where each item counts at most as often as in the reference"""
    return sum((Counter(candidate) & Counter(reference)).values())


def compute_rouge_1(candidate: str, reference: str) -> float:
    """
    ROUGE-1 recall (unigram overlap)

    Args:
        candidate: Model response
        reference: Ground truth

    Returns:
        Clipped unigram overlap divided by the reference token count
    """
    ref_words = tokenize(reference)
    if not ref_words:
        return 0.0
    return _clipped_overlap(tokenize(candidate), ref_words) / len(ref_words)


def compute_rouge_2(candidate: str, reference: str) -> float:
    """
    ROUGE-2 recall (bigram overlap)

    Args:
        candidate: Model response
        reference: Ground truth

    Returns:
        Clipped bigram overlap divided by the reference bigram count
    """
    ref_bigrams = get_bigrams(reference)
    if not ref_bigrams:
        return 0.0
    return _clipped_overlap(get_bigrams(candidate), ref_bigrams) / len(ref_bigrams)


def compute_rouge_l(candidate: str, reference: str) -> float:
    """
    ROUGE-L F-measure (longest common subsequence)

    Args:
        candidate: Model response
        reference: Ground truth

    Returns:
        2PR / (P + R) with P = LCS/|cand| and R = LCS/|ref|
    """
    cand_words = tokenize(candidate)
    ref_words = tokenize(reference)

    if not cand_words or not ref_words:
        return 0.0

    lcs = longest_common_subsequence(cand_words, ref_words)
    precision = lcs / len(cand_words)
    recall = lcs / len(ref_words)

    if precision + recall == 0:
        return 0.0

    return 2 * precision * recall / (precision + recall)


def compute_rouge_l_sum(candidate: str, reference: str) -> float:
    """ROUGE-L-Sum; computed as ROUGE-L (sentence-level LCS summation is not applied)"""
    return compute_rouge_l(candidate, reference)


def score_exact_match(response: str, reference: str) -> float:
    """
    Exact match evaluation

    Args:
        response: Model response
        reference: Ground truth

    Returns:
        1.0 if the strings match after stripping surrounding whitespace, else 0.0
    """
    return 1.0 if response.strip() == reference.strip() else 0.0


def _arguments_match(expected: dict, actual: dict) -> bool:
    """Argument maps match when they have the same size and equal values per key"""
    if len(expected) != len(actual):
        return False
    for key, expected_val in expected.items():
        if key not in actual or actual[key] != expected_val:
            return False
    return True


def compute_tool_call_score(
    actual: Sequence[ToolCall],
    expected: Sequence[ToolCall],
) -> float:
    """
    Tool-call accuracy

    Each expected call counts as matched when some actual call has the same
    name and matching arguments.

    Args:
        actual: Tool calls the model made
        expected: Tool calls the model should have made

    Returns:
        matched / len(expected); 1.0 when both are empty, 0.0 when only expected is empty
    """
    if not expected:
        return 1.0 if not actual else 0.0

    matches = 0
    for exp in expected:
        for act in actual:
            if exp.name == act.name and _arguments_match(exp.arguments, act.arguments):
                matches += 1
                break

    return matches / len(expected)
