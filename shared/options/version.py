"""Minimum-version negotiation for option sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from shared.protocol.constants import NO_VERSION
from shared.protocol.errors import VersionTooOld
from shared.settings import SETTINGS, Settings

from .values import OptionSet, OptionValue

logger = logging.getLogger(__name__)


def minimum_version(options: Union[OptionSet, Iterable[OptionValue]]) -> Optional[int]:
    """
    Smallest client version able to honor `options`, or None for no restriction.

    Only values changed from their default count; Unknown values never do.
    """
    values = options.values() if isinstance(options, OptionSet) else options
    required = [
        value.definition.min_version
        for value in values
        if not value.is_unknown and value.is_changed and value.definition.min_version != NO_VERSION
    ]
    return max(required) if required else None


@dataclass(frozen=True)
class Negotiation:
    minimum_version: Optional[int]
    baseline_version: int
    needs_confirmation: bool

    @property
    def allowed(self) -> bool:
        return not self.needs_confirmation

    def raise_for_confirmation(self) -> None:
        if self.needs_confirmation:
            raise VersionTooOld(self.minimum_version, self.baseline_version)

    def to_wire_version(self) -> int:
        return NO_VERSION if self.minimum_version is None else self.minimum_version


def negotiate(
    options: OptionSet,
    baseline_version: int,
    *,
    require_confirmation: bool,
    confirmed: bool = False,
) -> Negotiation:
    """
    Compute the minimum version for `options` and decide whether creation must pause.

    When the minimum exceeds `baseline_version` and `require_confirmation` is set,
    creation needs an explicit re-submission with `confirmed=True`.
    `require_confirmation=False` is the local/offline bypass.
    """
    required = minimum_version(options)
    exceeds = required is not None and required > baseline_version
    needs_confirmation = exceeds and require_confirmation and not confirmed
    if needs_confirmation:
        logger.info("Options need client version %s (baseline %s); asking for confirmation", required, baseline_version)
    return Negotiation(minimum_version=required, baseline_version=baseline_version, needs_confirmation=needs_confirmation)


def confirmation_required(networked: bool, settings: Optional[Settings] = None) -> bool:
    """Policy: networked games always confirm; practice games only when configured to."""
    settings = settings or SETTINGS
    return networked or settings.confirm_practice_games


def check_participant_version(version: int, options: Union[OptionSet, Optional[int]]) -> None:
    """Raise VersionTooOld if a participant at `version` cannot honor `options` (or a precomputed minimum)."""
    required = options if options is None or isinstance(options, int) else minimum_version(options)
    if required is not None and version < required:
        raise VersionTooOld(required, version)


__all__ = ["minimum_version", "Negotiation", "negotiate", "confirmation_required", "check_participant_version"]
