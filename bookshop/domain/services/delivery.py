"""
Pincode directory and delivery estimation

Both read their data from a JSON table so regions and pincodes can change
without code changes.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from bookshop.domain.value_objects.zip_code import ZipCode


@dataclass(frozen=True)
class DeliveryRegion:
    name: str
    prefixes: Tuple[str, ...]
    delivery_days: int
    express_available: bool
    location: str = ""


@dataclass(frozen=True)
class DeliveryEstimate:
    zip_code: str
    location: str
    delivery_days: int
    delivery_date: date
    express_available: bool
    cod_available: bool


class PincodeDirectory:
    """Pincode -> (city, state) lookup plus delivery regions"""

    def __init__(
        self,
        pincodes: Dict[str, Dict[str, str]],
        regions: List[DeliveryRegion],
        default_days: int = 5,
    ):
        self._pincodes = pincodes
        # Longest prefix wins
        self._regions = sorted(
            regions, key=lambda region: -max((len(p) for p in region.prefixes), default=0)
        )
        self.default_days = default_days
        self._logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_file(cls, path) -> "PincodeDirectory":
        with open(Path(path), encoding="utf-8") as fh:
            data = json.load(fh)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "PincodeDirectory":
        regions = [
            DeliveryRegion(
                name=name,
                prefixes=tuple(rule.get("prefixes", [])),
                delivery_days=int(rule["delivery_days"]),
                express_available=bool(rule.get("express_available", False)),
                location=rule.get("location", ""),
            )
            for name, rule in data.get("regions", {}).items()
        ]
        return cls(
            pincodes=data.get("pincodes", {}),
            regions=regions,
            default_days=int(data.get("default_delivery_days", 5)),
        )

    def lookup(self, zip_code: str) -> Optional[Tuple[str, str]]:
        """Return (city, state) for a known pincode"""
        entry = self._pincodes.get((zip_code or "").strip())
        if not entry:
            return None
        return entry["city"], entry["state"]

    def region_for(self, zip_code: str) -> Optional[DeliveryRegion]:
        for region in self._regions:
            if any(zip_code.startswith(prefix) for prefix in region.prefixes):
                return region
        return None


class DeliveryEstimator:
    """Estimates delivery time from a pincode"""

    def __init__(self, directory: PincodeDirectory):
        self._directory = directory
        self._logger = logging.getLogger(self.__class__.__name__)

    def estimate(self, zip_code: str, today: Optional[date] = None) -> DeliveryEstimate:
        pincode = ZipCode(zip_code).value
        today = today or date.today()

        region = self._directory.region_for(pincode)
        days = region.delivery_days if region else self._directory.default_days
        found = self._directory.lookup(pincode)
        if found:
            location = f"{found[0]}, {found[1]}"
        else:
            location = (region.location if region else "") or "India"

        self._logger.debug("Delivery estimate for %s: %s days", pincode, days)
        return DeliveryEstimate(
            zip_code=pincode,
            location=location,
            delivery_days=days,
            delivery_date=today + timedelta(days=days),
            express_available=bool(region and region.express_available),
            cod_available=True,
        )
