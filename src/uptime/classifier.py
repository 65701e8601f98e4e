"""Decides whether a validator was active in a single block.

Decision order, first match wins:

1. the validator (or its owner address) proposed the block;
2. the validator sent one of the first ``tx_sample_size`` transactions;
3. a rank-weighted statistical estimate.

This approximates participation where the data source exposes no signature
data. It is not a cryptographic check.
"""

from src.helpers.constants import TX_SAMPLE_SIZE
from src.helpers.logging import get_logger
from src.uptime.estimator import Estimator
from src.uptime.models import ActivityBasis, ActivityVerdict, BlockSample, Validator

logger = get_logger(__name__)


class BlockActivityClassifier:
    """Layered proposer/sender/estimate classifier."""

    def __init__(
        self, estimator: Estimator, tx_sample_size: int = TX_SAMPLE_SIZE
    ) -> None:
        self.estimator = estimator
        self.tx_sample_size = tx_sample_size

    def classify(self, validator: Validator, block: BlockSample) -> ActivityVerdict:
        """Classify one validator against one block.

        Never raises: a block that cannot be classified yields a default
        coin flip with basis ``degraded``.
        """
        try:
            return self._classify(validator, block)
        except Exception as e:
            logger.warning(
                "Activity analysis error for %s at block %s: %s",
                validator.moniker or validator.address,
                getattr(block, "height", "?"),
                e,
            )
            signed, proposed = self.estimator.draw_default()
            return ActivityVerdict(
                signed=signed, proposed=proposed, basis=ActivityBasis.DEGRADED
            )

    def _classify(self, validator: Validator, block: BlockSample) -> ActivityVerdict:
        if block.proposer and validator.matches(block.proposer):
            return ActivityVerdict(
                signed=True, proposed=True, basis=ActivityBasis.PROPOSER
            )

        for sender in block.tx_senders[: self.tx_sample_size]:
            if validator.matches(sender):
                return ActivityVerdict(
                    signed=True, proposed=False, basis=ActivityBasis.TRANSACTION
                )

        return ActivityVerdict(
            signed=self.estimator.draw_signed(validator.rank),
            proposed=False,
            basis=ActivityBasis.ESTIMATE,
        )


__all__ = ["BlockActivityClassifier"]
