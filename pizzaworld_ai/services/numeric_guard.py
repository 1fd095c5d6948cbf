from __future__ import annotations

import logging
from typing import Optional

from pizzaworld_ai.models.assistant import BusinessContext, ValidationOutcome
from pizzaworld_ai.shared.numbers import equivalent_forms, normalized_tokens

logger = logging.getLogger(__name__)


def validate(generated_text: Optional[str], context: BusinessContext) -> ValidationOutcome:
    """Accept text only if every number token in it appears in the context.

    Only currency amounts and comma-grouped numbers are checked; prose is not.
    ``$1,200`` and ``$1,200.00`` count as the same value.
    """
    if not generated_text or not generated_text.strip():
        return ValidationOutcome(accepted=True)

    reference = context.numeric_literals
    rejected = {
        token
        for token in normalized_tokens(generated_text)
        if reference.isdisjoint(equivalent_forms(token))
    }
    if rejected:
        logger.warning(
            "Generated text for %s contains unverified numbers: %s",
            context.scope_key,
            ", ".join(sorted(rejected)),
        )
        return ValidationOutcome(accepted=False, rejected_tokens=frozenset(rejected))
    return ValidationOutcome(accepted=True)
