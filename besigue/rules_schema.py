"""Validation schema for Bésigue rules configuration."""

from __future__ import annotations

from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

MELD_TYPE_NAMES = (
    "besigue",
    "common_marriage",
    "royal_marriage",
    "four_jacks",
    "four_queens",
    "four_kings",
    "four_aces",
    "four_jokers",
    "sequence",
)


class MeldPoints(BaseModel):
    besigue: int = Field(40, gt=0)
    common_marriage: int = Field(20, gt=0)
    royal_marriage: int = Field(40, gt=0)
    four_jacks: int = Field(40, gt=0)
    four_queens: int = Field(60, gt=0)
    four_kings: int = Field(80, gt=0)
    four_aces: int = Field(100, gt=0)
    four_jokers: int = Field(200, gt=0)
    sequence: int = Field(250, gt=0)
    trump_four_multiplier: int = Field(
        2,
        ge=1,
        description="Multiplier for a four-of-a-kind made entirely of trump cards.",
    )
    trump_sequence_multiplier: int = Field(1, ge=1)
    single_declaration: list[str] = Field(
        default_factory=list,
        description="Meld types a player may declare at most once per game.",
    )

    model_config = {"frozen": True}

    @field_validator("single_declaration")
    @classmethod
    def validate_meld_names(cls, value: list[str]) -> list[str]:
        normalized = [name.lower() for name in value]
        for name in normalized:
            if name not in MELD_TYPE_NAMES:
                raise ValueError(f"Unknown meld type: {name!r}")
        return normalized

    def base_points(self, meld_name: str) -> int:
        return int(getattr(self, meld_name))


class ScoringConfig(BaseModel):
    brisque_value: int = Field(10, ge=0, description="Points per brisque when converted.")
    final_trick_bonus: int = Field(10, ge=0, description="Bonus for winning the last trick of a round.")
    seven_of_trump_bonus: int = Field(10, ge=0, description="Bonus per seven of trump in a won trick.")
    penalty: int = Field(-20, le=0, description="Applied instead of brisque points when ineligible.")
    brisque_cutoff: int = Field(600, gt=0, description="Once any score reaches this, nobody converts brisques.")
    min_brisques: int = Field(5, ge=0)
    min_score_for_brisques: int = Field(100, ge=0)

    model_config = {"frozen": True}


class RuleSet(BaseModel):
    player_count: int = Field(2, ge=2, le=4)
    winning_score: Optional[int] = Field(
        None,
        gt=0,
        description="Defaults to 1000 for two players and 750 otherwise.",
    )
    hand_size: int = Field(9, ge=1, le=12)
    deal_packet_size: int = Field(3, ge=1)
    dealer_determination: Literal["random", "draw_jacks"] = "random"
    melds: MeldPoints = Field(default_factory=MeldPoints)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    model_config = {"frozen": True}

    @field_validator("dealer_determination", mode="before")
    @classmethod
    def normalize_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower().replace("-", "_")
        return value

    @model_validator(mode="after")
    def ensure_deck_covers_deal(self) -> "RuleSet":
        if self.player_count * self.hand_size > 132:
            raise ValueError("Hands do not fit in a 132-card deck.")
        return self

    @property
    def target_score(self) -> int:
        if self.winning_score is not None:
            return self.winning_score
        return 1000 if self.player_count == 2 else 750

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "RuleSet":
        return cls.model_validate(dict(payload))
