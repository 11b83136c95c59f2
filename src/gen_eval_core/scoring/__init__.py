"""
Scoring sub-package

Provides computation-based text scoring and LLM Judge scoring logic.
"""

from gen_eval_core.domain.value_objects import ScoringResult
from gen_eval_core.scoring.scorer import (
    COMPUTATION_SCORERS,
    is_computation_metric,
    score_record,
)
from gen_eval_core.scoring.text_scorers import (
    tokenize,
    get_bigrams,
    longest_common_subsequence,
    compute_bleu_score,
    compute_rouge_1,
    compute_rouge_2,
    compute_rouge_l,
    compute_rouge_l_sum,
    score_exact_match,
    compute_tool_call_score,
)
from gen_eval_core.scoring.llm_judge import (
    ModelJudgeError,
    ModelJudgeScorer,
    parse_preference,
    parse_rating,
)

__all__ = [
    # value objects (re-exported from domain)
    "ScoringResult",
    # dispatcher
    "COMPUTATION_SCORERS",
    "is_computation_metric",
    "score_record",
    # text primitives
    "tokenize",
    "get_bigrams",
    "longest_common_subsequence",
    # computation scorers
    "compute_bleu_score",
    "compute_rouge_1",
    "compute_rouge_2",
    "compute_rouge_l",
    "compute_rouge_l_sum",
    "score_exact_match",
    "compute_tool_call_score",
    # llm judge
    "ModelJudgeError",
    "ModelJudgeScorer",
    "parse_preference",
    "parse_rating",
]
