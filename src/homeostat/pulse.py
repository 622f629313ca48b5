"""
Pulse computation for Homeostat.

The pulse is the derived health/alert summary of a workspace. It is
computed fresh on every invocation from the two configuration documents
and the bootstrap check, and never persisted.

Alert codes, evaluated independently in this fixed order:
    homeostasis_missing
    vitals_missing
    missing_core_files:<count>
    vitals_stale:<age>d              age in days to one decimal
    gate:block_new_features=true
    gate:require_wbc:<count>
    inflammation:<level>             level >= inflammation_alert_at
    cortisol:<level>                 level >= cortisol_alert_at
"""

from datetime import UTC, datetime

from homeostat.config.loader import ConfigLoader, sha256_hex
from homeostat.schema import (
    BootstrapStatus,
    HomeostasisDocument,
    Pulse,
    VitalsDocument,
)
from homeostat.settings import HomeostatSettings

ALERT_SEPARATOR = "|"
ATTENTION_PREFIX = "BRAIN ATTENTION: "
SECONDS_PER_DAY = 60 * 60 * 24


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Returns None for absent or unparsable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def compute_age_days(timestamp: str | None, now: datetime | None = None) -> float | None:
    """Days between timestamp and now, floored at zero; None if unknown."""
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return None
    now = now or datetime.now(UTC)
    return max(0.0, (now - parsed).total_seconds() / SECONDS_PER_DAY)


def _fmt(value: object) -> str:
    if value is None:
        return "unknown"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PulseComputer:
    """
    Combines the typed views into a Pulse.

    Usage:
        pulse = PulseComputer(settings).compute(homeostasis, vitals, bootstrap)
        if pulse.attention_message:
            ...
    """

    def __init__(self, settings: HomeostatSettings | None = None) -> None:
        self.settings = settings or HomeostatSettings()

    def compute(
        self,
        homeostasis: HomeostasisDocument,
        vitals: VitalsDocument,
        bootstrap: BootstrapStatus,
        workspace_root: str = "",
        now: datetime | None = None,
    ) -> Pulse:
        """
        Compute the pulse.

        Args:
            homeostasis: Loaded first document (mindset + reflexes)
            vitals: Loaded second document
            bootstrap: Result of the bootstrap-file check
            workspace_root: Recorded on the pulse for rendering
            now: Wall-clock override for testing

        Returns:
            Pulse with alerts and, when any fired, attention message and hash
        """
        snapshot = vitals.vitals
        chemical = snapshot.chemical_state
        gates = snapshot.gates
        age_days = compute_age_days(snapshot.generated_at, now)
        age_label = "unknown" if age_days is None else f"{age_days:.1f}"

        alerts: list[str] = []
        if not homeostasis.exists:
            alerts.append("homeostasis_missing")
        if not vitals.exists:
            alerts.append("vitals_missing")
        if bootstrap.missing:
            alerts.append(f"missing_core_files:{len(bootstrap.missing)}")
        if age_days is not None and age_days > self.settings.vitals_stale_days:
            alerts.append(f"vitals_stale:{age_label}d")
        if gates.block_new_features is True:
            alerts.append("gate:block_new_features=true")
        if gates.require_wbc:
            alerts.append(f"gate:require_wbc:{len(gates.require_wbc)}")
        if chemical.inflammation is not None and chemical.inflammation >= self.settings.inflammation_alert_at:
            alerts.append(f"inflammation:{chemical.inflammation}")
        if chemical.cortisol is not None and chemical.cortisol >= self.settings.cortisol_alert_at:
            alerts.append(f"cortisol:{chemical.cortisol}")

        mindset = homeostasis.mindset
        sensory, motor, inhibition = homeostasis.reflexes.counts()
        one_line = " | ".join([
            "_brain pulse",
            f"mode={_fmt(mindset.mode)}",
            f"caution={_fmt(mindset.caution)}",
            f"focus={_fmt(mindset.focus)}",
            f"inflammation={_fmt(chemical.inflammation)}",
            f"cortisol={_fmt(chemical.cortisol)}",
            f"block_new_features={_fmt(gates.block_new_features)}",
            f"reflexes(s/m/i)={sensory}/{motor}/{inhibition}",
            f"vitals_age_days={age_label}",
        ])

        return Pulse(
            workspace_root=workspace_root,
            one_line=one_line,
            alerts=alerts,
            missing_core_files=list(bootstrap.missing),
            attention_message=attention_message(alerts),
            attention_hash=attention_digest(alerts),
            vitals_age_days=age_days,
            vitals=snapshot,
        )

    def compute_for(self, loader: ConfigLoader, now: datetime | None = None) -> Pulse:
        """Load everything through a ConfigLoader and compute the pulse."""
        return self.compute(
            loader.load_homeostasis(),
            loader.load_vitals(),
            loader.bootstrap_status(),
            workspace_root=str(loader.workspace_root),
            now=now,
        )


def attention_message(alerts: list[str]) -> str | None:
    """Join alerts into the attention message, or None for no alerts."""
    if not alerts:
        return None
    return ATTENTION_PREFIX + " | ".join(alerts)


def attention_digest(alerts: list[str]) -> str | None:
    """Stable hash of the alert set, or None for no alerts."""
    if not alerts:
        return None
    return sha256_hex(ALERT_SEPARATOR.join(alerts))
