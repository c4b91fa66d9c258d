"""
Token budget enforcement.

Token counts are estimated as ceil(len(formatted context) / chars_per_token).
The default ratio of 4 characters per token is an approximation of common
BPE tokenizers on source code, not an exact count.
"""

from codectx.retrieval.formatter import format_context
from codectx.retrieval.models import ContextBundle
from codectx.shared.utils import DEFAULT_CHARS_PER_TOKEN, estimate_tokens

# Sections in pruning order; current_file and project_context are never pruned
PRUNE_ORDER = ("similar_code", "related_files", "dependencies")


def estimate_bundle_tokens(bundle: ContextBundle, chars_per_token: int = DEFAULT_CHARS_PER_TOKEN) -> int:
    return estimate_tokens(format_context(bundle), chars_per_token)


def prune_to_budget(
    bundle: ContextBundle,
    max_tokens: int,
    chars_per_token: int = DEFAULT_CHARS_PER_TOKEN,
) -> ContextBundle:
    """
    Remove one entry at a time, last first, until *bundle* fits *max_tokens*.

    similar_code is drained first, then related_files, then dependencies.
    When all three are empty the bundle may still exceed the budget.
    Sets bundle.total_tokens to the final estimate.
    """
    tokens = estimate_bundle_tokens(bundle, chars_per_token)
    while tokens > max_tokens:
        section = next((name for name in PRUNE_ORDER if getattr(bundle, name)), None)
        if section is None:
            break
        getattr(bundle, section).pop()
        tokens = estimate_bundle_tokens(bundle, chars_per_token)

    bundle.total_tokens = tokens
    return bundle
