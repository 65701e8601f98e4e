"""Tests for the layered block activity classifier."""

import pytest

from src.uptime.classifier import BlockActivityClassifier
from src.uptime.models import ActivityBasis, BlockSample

VALIDATOR = "0x" + "a" * 40
OWNER = "0x" + "c" * 40
OTHER = "0x" + "f" * 40


def _block(
    proposer: str | None = OTHER, senders: list[str] | None = None
) -> BlockSample:
    return BlockSample(
        height=10,
        proposer=proposer,
        tx_senders=senders or [],
        timestamp=1_700_000_000,
        tx_count=len(senders or []),
    )


class TestBlockActivityClassifier:
    """Tests for BlockActivityClassifier."""

    def test_proposer_match(self, make_validator, scripted_estimator) -> None:
        """Test the proposing validator is signed and proposed."""
        estimator = scripted_estimator(signed=False)
        classifier = BlockActivityClassifier(estimator)

        verdict = classifier.classify(
            make_validator(VALIDATOR, rank=1), _block(proposer="0x" + "A" * 40)
        )

        assert verdict.signed is True
        assert verdict.proposed is True
        assert verdict.basis is ActivityBasis.PROPOSER
        assert estimator.signed_draws == []

    def test_owner_address_counts_as_proposer(
        self, make_validator, scripted_estimator
    ) -> None:
        """Test the owner address is an alias for the validator."""
        classifier = BlockActivityClassifier(scripted_estimator())

        verdict = classifier.classify(
            make_validator(VALIDATOR, owner_address=OWNER), _block(proposer=OWNER)
        )

        assert verdict.basis is ActivityBasis.PROPOSER

    def test_transaction_sender_match(
        self, make_validator, scripted_estimator
    ) -> None:
        """Test sending an early transaction counts as signed only."""
        classifier = BlockActivityClassifier(scripted_estimator(signed=False))

        verdict = classifier.classify(
            make_validator(VALIDATOR), _block(senders=[OTHER, VALIDATOR])
        )

        assert verdict.signed is True
        assert verdict.proposed is False
        assert verdict.basis is ActivityBasis.TRANSACTION

    def test_sender_beyond_sample_is_ignored(
        self, make_validator, scripted_estimator
    ) -> None:
        """Test only the first tx_sample_size senders are inspected."""
        estimator = scripted_estimator(signed=False)
        classifier = BlockActivityClassifier(estimator, tx_sample_size=2)

        verdict = classifier.classify(
            make_validator(VALIDATOR, rank=7),
            _block(senders=[OTHER, OTHER, VALIDATOR]),
        )

        assert verdict.basis is ActivityBasis.ESTIMATE
        assert verdict.signed is False
        assert estimator.signed_draws == [7]

    def test_estimate_when_no_evidence(
        self, make_validator, scripted_estimator
    ) -> None:
        """Test the estimator decides when neither layer matches."""
        estimator = scripted_estimator(signed=True)
        classifier = BlockActivityClassifier(estimator)

        verdict = classifier.classify(make_validator(VALIDATOR, rank=3), _block())

        assert verdict.signed is True
        assert verdict.proposed is False
        assert verdict.basis is ActivityBasis.ESTIMATE
        assert estimator.signed_draws == [3]

    def test_unknown_proposer_falls_through(
        self, make_validator, scripted_estimator
    ) -> None:
        """Test a block without a proposer goes to the later layers."""
        classifier = BlockActivityClassifier(scripted_estimator())

        verdict = classifier.classify(
            make_validator(VALIDATOR), _block(proposer=None, senders=[VALIDATOR])
        )

        assert verdict.basis is ActivityBasis.TRANSACTION

    def test_error_degrades_to_default(
        self, make_validator, scripted_estimator, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test an internal failure yields the default coin flip, not an error."""
        estimator = scripted_estimator(default=(False, True))

        def broken(rank: int) -> bool:
            raise RuntimeError("estimator exploded")

        estimator.draw_signed = broken
        classifier = BlockActivityClassifier(estimator)

        verdict = classifier.classify(make_validator(VALIDATOR), _block())

        assert verdict.signed is False
        assert verdict.proposed is True
        assert verdict.basis is ActivityBasis.DEGRADED
        assert estimator.default_draws == 1
        assert "estimator exploded" in caplog.text
