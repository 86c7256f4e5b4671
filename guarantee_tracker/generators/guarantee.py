"""Sample bank guarantee generator."""

from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from faker import Faker

from guarantee_tracker.config import HOME_CURRENCY
from guarantee_tracker.models import Currency, GuaranteeStatus, GuaranteeType, NewGuarantee


class GuaranteeGenerator:
    """Generate plausible guarantees for demos and load checks.

    Parameters
    ----------
    seed : int | None
        Seeds both Faker and the weighted choices, so batches repeat.
    locale : str
        Faker locale used for dates.
    today : date | None
        Reference date for issue dates and status.
    """

    BANKS = [
        "البنك الأهلي",
        "بنك الرياض",
        "البنك السعودي الفرنسي",
        "مصرف الراجحي",
        "بنك البلاد",
        "البنك العربي الوطني",
    ]

    GUARANTEE_TYPES = list(GuaranteeType)
    TYPE_WEIGHTS = [0.40, 0.25, 0.20, 0.15]

    CURRENCIES = [HOME_CURRENCY, Currency.USD.value, Currency.EUR.value]
    CURRENCY_WEIGHTS = [0.80, 0.15, 0.05]

    # Value ranges by guarantee type
    VALUE_RANGES = {
        GuaranteeType.PERFORMANCE: (250_000, 5_000_000),
        GuaranteeType.INITIAL: (50_000, 1_500_000),
        GuaranteeType.FINAL: (100_000, 3_000_000),
        GuaranteeType.MAINTENANCE: (20_000, 800_000),
    }

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "ar_SA",
        today: date | None = None,
    ) -> None:
        self.fake = Faker(locale)
        self.rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)
        self.today = today or date.today()
        self._sequence = 0

    def generate(self) -> NewGuarantee:
        """Generate a single guarantee.

        Returns
        -------
        NewGuarantee
            Fields ready to send to a store.
        """
        return self._generate_one()

    def generate_batch(self, count: int) -> Iterator[NewGuarantee]:
        """Generate multiple guarantees.

        Parameters
        ----------
        count : int
            Number of guarantees to generate.

        Yields
        ------
        NewGuarantee
            Generated guarantees.
        """
        for _ in range(count):
            yield self._generate_one()

    def _generate_one(self) -> NewGuarantee:
        self._sequence += 1
        guarantee_type = self.rng.choices(self.GUARANTEE_TYPES, weights=self.TYPE_WEIGHTS, k=1)[0]
        low, high = self.VALUE_RANGES[guarantee_type]
        value = Decimal(self.rng.randrange(low, high, 1_000))

        issue_date = self.fake.date_between(
            start_date=self.today - timedelta(days=2 * 365),
            end_date=self.today,
        )
        expiry_date = issue_date + timedelta(days=self.rng.choice([90, 180, 365, 730]))

        return NewGuarantee(
            guarantee_number=f"BG-{issue_date.year}-{self._sequence:03d}",
            guarantee_type=guarantee_type.value,
            value=value,
            currency=self.rng.choices(self.CURRENCIES, weights=self.CURRENCY_WEIGHTS, k=1)[0],
            issue_date=issue_date,
            expiry_date=expiry_date,
            status=self._status_for(issue_date, expiry_date),
            bank_name=self.rng.choice(self.BANKS),
        )

    def _status_for(self, issue_date: date, expiry_date: date) -> GuaranteeStatus:
        if expiry_date < self.today:
            return GuaranteeStatus.EXPIRED
        # Recently issued guarantees are often still under review
        if (self.today - issue_date).days < 30 and self.rng.random() < 0.5:
            return GuaranteeStatus.PENDING
        return GuaranteeStatus.ACTIVE
