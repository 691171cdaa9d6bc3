"""Static game data: the upgrade tree and news events.

Read-only tables, built once at import. Nothing here is persisted; save
files reference entries by id.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UpgradeCategory(Enum):
    MARKETING = "marketing"
    R_AND_D = "r_and_d"
    COMPLIANCE = "compliance"


class TriggerConditionType(Enum):
    ALWAYS = "always"
    MARKET_CAP_ABOVE = "market_cap_above"
    UPGRADE_IS_PURCHASED = "upgrade_is_purchased"
    HISTORICAL_CANDLE_COUNT_ABOVE = "historical_candle_count_above"
    HYPE_SCORE_ABOVE = "hype_score_above"
    GLOBAL_INTEREST_RATE_ABOVE = "global_interest_rate_above"


class GameEffectType(Enum):
    PRICE_TREND_MODIFIER = "price_trend_modifier"
    HYPE_MODIFIER = "hype_modifier"
    NEGATIVE_EVENT_CHANCE_MODIFIER = "negative_event_chance_modifier"
    INSTITUTIONAL_TRUST_MODIFIER = "institutional_trust_modifier"


@dataclass(frozen=True)
class Upgrade:
    id: str
    name: str
    description: str
    category: UpgradeCategory
    cost: float
    effect_description: str
    effect_duration: int  # candles; 0 = instant/permanent
    depends_on: str | None = None
    growth_multiplier: float | None = None


@dataclass(frozen=True)
class TriggerCondition:
    type: TriggerConditionType
    value: float = 0.0
    string_value: str | None = None  # e.g. a required upgrade id


@dataclass(frozen=True)
class GameEvent:
    id: str
    headline: str
    trigger_conditions: tuple[TriggerCondition, ...]
    trigger_chance: float  # per tick
    is_dummy: bool = False
    is_one_time: bool = False
    effect_type: GameEffectType | None = None
    effect_value: float = 0.0
    effect_duration: int = 0


# -- upgrades --------------------------------------------------------------
UPGRADES = [
    # R&D
    Upgrade(
        id="rd_pos_consensus",
        name="PoS Consensus Update",
        description="Refactor the core protocol for efficiency and scalability.",
        category=UpgradeCategory.R_AND_D,
        cost=2_000_000.0,
        effect_description="+20% base price growth for 100 candles.",
        effect_duration=100,
        growth_multiplier=1.20,
    ),
    Upgrade(
        id="rd_quantum_encryption",
        name="Quantum Encryption",
        description="Implement next-generation security to deter attackers.",
        category=UpgradeCategory.R_AND_D,
        cost=5_000_000.0,
        effect_description="-50% chance of negative hack/scandal events for 200 candles.",
        effect_duration=200,
        depends_on="rd_pos_consensus",
    ),
    Upgrade(
        id="rd_layer2_scaling",
        name="Layer-2 Scaling Solution",
        description="Boost network throughput and reduce transaction costs.",
        category=UpgradeCategory.R_AND_D,
        cost=3_500_000.0,
        effect_description="+15% background Hype generation for 150 candles.",
        effect_duration=150,
        depends_on="rd_quantum_encryption",
    ),
    # Marketing
    Upgrade(
        id="mkt_social_blitz",
        name="Social Media Blitz",
        description="Flood social platforms with targeted advertisements and influencer posts.",
        category=UpgradeCategory.MARKETING,
        cost=750_000.0,
        effect_description="Instant +50 Hype and increased retail interest for 80 candles.",
        effect_duration=80,
    ),
    Upgrade(
        id="mkt_viral_meme",
        name='Viral "Meme" Campaign',
        description="Attempt to capture the chaotic energy of the internet. High risk, high reward.",
        category=UpgradeCategory.MARKETING,
        cost=1_000_000.0,
        effect_description="70% chance of +40 Hype for 100 candles, 30% chance of a small negative 'Cringe' event.",
        effect_duration=100,
        depends_on="mkt_social_blitz",
    ),
    Upgrade(
        id="mkt_stadium_rights",
        name="Stadium Naming Rights",
        description="Put our name on a major sports stadium for massive brand recognition.",
        category=UpgradeCategory.MARKETING,
        cost=12_000_000.0,
        effect_description="Triggers a 'Mainstream Mania' event for 20 candles.",
        effect_duration=20,
        depends_on="mkt_viral_meme",
    ),
    # Compliance
    Upgrade(
        id="cmp_offshore_foundation",
        name="Offshore Foundation Setup",
        description="Establish a legal entity in a jurisdiction with more 'flexible' financial laws.",
        category=UpgradeCategory.COMPLIANCE,
        cost=1_500_000.0,
        effect_description="-50% transaction taxes for 300 candles, but slightly increases chance of 'Scandal' events.",
        effect_duration=300,
    ),
    Upgrade(
        id="cmp_ex_regulator",
        name="Hire Ex-Regulator",
        description="Bring on a former regulator as a consultant for their invaluable insight and connections.",
        category=UpgradeCategory.COMPLIANCE,
        cost=3_000_000.0,
        effect_description="Grants one-time use ability to nullify a 'Regulatory Crackdown' event.",
        effect_duration=0,
        depends_on="cmp_offshore_foundation",
    ),
    Upgrade(
        id="cmp_sandbox_approval",
        name="Regulatory Sandbox Approval",
        description="Work with regulators to gain approval for our technology in a controlled environment.",
        category=UpgradeCategory.COMPLIANCE,
        cost=4_500_000.0,
        effect_description="Greatly increases Institutional Trust and provides immunity to minor negative regulatory news for 250 candles.",
        effect_duration=250,
        depends_on="cmp_ex_regulator",
    ),
]
UPGRADES_BY_ID = {u.id: u for u in UPGRADES}


def upgrades_in_category(category: UpgradeCategory) -> list[Upgrade]:
    return [u for u in UPGRADES if u.category == category]


# -- news events -----------------------------------------------------------
_ALWAYS = (TriggerCondition(TriggerConditionType.ALWAYS),)

EVENTS = [
    # flavor only, no effect
    GameEvent(
        id="dummy_1",
        headline="Can't believe the season finale of 'Galaxy Raiders' ended like that! #spoilers",
        trigger_conditions=_ALWAYS,
        trigger_chance=0.1,
        is_dummy=True,
    ),
    GameEvent(
        id="dummy_2",
        headline="Is it just me or is coffee tasting extra good today? #caffeine",
        trigger_conditions=_ALWAYS,
        trigger_chance=0.1,
        is_dummy=True,
    ),
    GameEvent(
        id="dummy_3",
        headline="Planning my vacation for next year. Any recommendations?",
        trigger_conditions=_ALWAYS,
        trigger_chance=0.1,
        is_dummy=True,
    ),
    # market events
    GameEvent(
        id="crisis_interest_rate",
        headline=("Global Central Banks unite to raise interest rates to 5% to combat "
                  "persistent inflation. Analysts expect a market downturn."),
        trigger_conditions=(TriggerCondition(TriggerConditionType.GLOBAL_INTEREST_RATE_ABOVE, 5.0),),
        trigger_chance=0.1,
        effect_type=GameEffectType.PRICE_TREND_MODIFIER,
        effect_value=-0.10,
        effect_duration=200,
    ),
    GameEvent(
        id="hype_celeb_tweet",
        headline="Just heard about $YOUR_ASSET... looks intriguing. Might have to pick some up. 👀 #crypto #altcoin",
        trigger_conditions=(TriggerCondition(TriggerConditionType.MARKET_CAP_ABOVE, 10_000_000.0),),
        trigger_chance=0.02,
        effect_type=GameEffectType.HYPE_MODIFIER,
        effect_value=50.0,
        effect_duration=0,  # instant
    ),
    GameEvent(
        id="review_pos_update",
        headline=("TechFront Magazine publishes a glowing review of YourAsset, praising its "
                  "recent 'PoS Update' as a 'major leap forward in efficiency and security'."),
        trigger_conditions=(
            TriggerCondition(TriggerConditionType.UPGRADE_IS_PURCHASED, string_value="rd_pos_consensus"),
        ),
        trigger_chance=0.2,
        is_one_time=True,
        effect_type=GameEffectType.INSTITUTIONAL_TRUST_MODIFIER,
        effect_value=0.15,
        effect_duration=150,
    ),
    GameEvent(
        id="panic_flash_crash",
        headline=("BREAKING: Unexplained server outage at a major exchange has triggered a "
                  "flash crash across the entire market! Trading paused."),
        trigger_conditions=_ALWAYS,
        trigger_chance=0.005,  # very rare
        effect_type=GameEffectType.PRICE_TREND_MODIFIER,
        effect_value=-0.30,
        effect_duration=25,
    ),
]
EVENTS_BY_ID = {e.id: e for e in EVENTS}
