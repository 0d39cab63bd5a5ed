"""Postal code to town resolution - Database cache in front of a remote directory."""

import logging
from dataclasses import dataclass
from datetime import timedelta

from .exceptions import InvalidContent
from .models import PostalCode
from .ports import Clock, PostalCodeRepository, TownDirectory
from .registration import utcnow

logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(days=90)


@dataclass(frozen=True)
class TownResolution:
    town: str | None
    source: str  # "db", "remote" or "none"


@dataclass
class TownService:
    cache: PostalCodeRepository
    directory: TownDirectory
    clock: Clock = utcnow
    country: str = "FR"
    cache_ttl: timedelta = CACHE_TTL

    def resolve(self, postal_code: str) -> TownResolution:
        """
        Find the town for a postal code.

        A cached entry answers directly and has its hit counter bumped.
        Otherwise the remote directory is asked and a found town is
        cached until ``cache_ttl`` from now. An unknown code is not
        cached.

        Raises:
            InvalidContent: empty postal code
            TownLookupFailed: the directory could not be reached
        """
        postal_code = (postal_code or "").strip()
        if not postal_code:
            raise InvalidContent("Postal code missing")

        cached = self.cache.find(self.country, postal_code)
        if cached is not None:
            try:
                self.cache.record_hit(cached.id)
            except Exception:
                # A lost counter increment must not fail the lookup
                logger.warning("Could not count hit for postal code %s", postal_code, exc_info=True)
            return TownResolution(town=cached.town, source="db")

        town = self.directory.lookup(self.country, postal_code)
        if town is None:
            return TownResolution(town=None, source="none")

        self.cache.upsert(
            PostalCode(
                postal_code=postal_code,
                town=town,
                country=self.country,
                expires_at=self.clock() + self.cache_ttl,
            )
        )
        return TownResolution(town=town, source="remote")
