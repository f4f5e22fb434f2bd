from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable

from core.config import get_settings
from data.quality.candidates import DeletionCandidates
from data.quality.detail import SignalDetail

logger = logging.getLogger(__name__)

ACADEMIC_GOVERNMENT = "academic_government"
INVALID_PHASE = "invalid_phase"
UNTRUSTED_SOURCE = "untrusted_source"
UNTRUSTED_ORIGIN = "untrusted_origin"
GARBAGE_TITLE = "garbage_title"

CLINICAL_TRIAL_TYPES = frozenset({"clinical_trial_phase_transition", "clinical_trial_new_ind"})
END_CLIENT_TYPES = CLINICAL_TRIAL_TYPES | {"funding_new_award", "ma_transaction"}
JOB_SIGNAL_TYPES = frozenset(
    {"competitor_job_posting", "stale_job_posting", "target_company_job"}
)

ACADEMIC_GOVERNMENT_PATTERN = re.compile(
    r"university|universite|college|hospital|medical cent(?:er|re)|health system"
    r"|health cent(?:er|re)|\binstitute\b|school of|\bschool\b|foundation|academy"
    r"|academie|\bNIH\b|\bNCI\b|\bFDA\b|\bCDC\b|\bNHLBI\b|national institute"
    r"|national cancer|national heart|department of|children's|childrens|memorial"
    r"|baptist|methodist|presbyterian|kaiser|mayo clinic|cleveland clinic"
    r"|johns hopkins|\bmit\b|caltech|stanford|harvard|\byale\b|columbia university"
    r"|university of pennsylvania|duke university|vanderbilt|emory university"
    r"|\.edu\b|research cent(?:er|re)|cancer cent(?:er|re)|\bclinic\b"
    r"|\bconsortium\b|\bsociety\b|\bassociation\b|ministry of|\bgovernment\b"
    r"|\bfederal\b|national laborator|oncology group|cooperative group|intergroupe"
    r"|francophone|thoracique|sloan kettering|anderson cancer",
    re.IGNORECASE,
)

GARBAGE_TITLE_FRAGMENTS = (
    "view all jobs",
    "browse jobs",
    "search jobs",
    "jobs by category",
    "job alert",
    "sign in",
    "apply now",
    "load more",
    "skip to main content",
    "cookie",
    "privacy policy",
    "post a job",
)


@dataclass(frozen=True)
class RuleConfig:
    trusted_job_source: str = "linkedin"
    academic_pattern: re.Pattern = ACADEMIC_GOVERNMENT_PATTERN
    pre_clinical_phase: str = "Pre-Clinical"
    unknown_phase_values: frozenset[str] = frozenset({"?", "NA", "N/A"})
    garbage_title_fragments: tuple[str, ...] = GARBAGE_TITLE_FRAGMENTS
    end_client_types: frozenset[str] = END_CLIENT_TYPES
    phase_types: frozenset[str] = CLINICAL_TRIAL_TYPES
    board_checked_types: frozenset[str] = frozenset({"stale_job_posting"})
    ats_checked_types: frozenset[str] = frozenset({"competitor_job_posting"})
    untrusted_origin_types: frozenset[str] = frozenset({"target_company_job"})
    garbage_title_types: frozenset[str] = JOB_SIGNAL_TYPES

    @classmethod
    def from_settings(cls) -> "RuleConfig":
        return cls(trusted_job_source=get_settings().trusted_job_source)

    @property
    def all_types(self) -> frozenset[str]:
        return (
            self.end_client_types
            | self.phase_types
            | self.board_checked_types
            | self.ats_checked_types
            | self.untrusted_origin_types
            | self.garbage_title_types
        )


@dataclass(frozen=True)
class ClassificationRule:
    reason: str
    signal_types: Callable[[RuleConfig], frozenset[str]]
    predicate: Callable[[SignalDetail, RuleConfig], bool]
    description: str = field(default="")


def is_academic_or_government(detail: SignalDetail, config: RuleConfig) -> bool:
    name = detail.end_client_name
    return bool(name) and config.academic_pattern.search(name) is not None


def has_invalid_phase(detail: SignalDetail, config: RuleConfig) -> bool:
    if detail.phase_from == config.pre_clinical_phase:
        return True
    return detail.phase_to.strip() in config.unknown_phase_values


def has_untrusted_source(detail: SignalDetail, config: RuleConfig) -> bool:
    trusted = config.trusted_job_source.lower()
    if detail.signal_type in config.board_checked_types:
        origins = {detail.source.strip().lower(), detail.job_board.strip().lower()}
        return trusted not in origins
    if detail.signal_type in config.ats_checked_types:
        ats_source = detail.ats_source.strip().lower()
        return bool(ats_source) and ats_source != trusted
    return False


def has_untrusted_origin(detail: SignalDetail, config: RuleConfig) -> bool:
    return detail.signal_type in config.untrusted_origin_types


def has_garbage_title(detail: SignalDetail, config: RuleConfig) -> bool:
    title = detail.job_title.lower()
    if not title:
        return False
    return any(fragment in title for fragment in config.garbage_title_fragments)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        reason=ACADEMIC_GOVERNMENT,
        signal_types=lambda config: config.end_client_types,
        predicate=is_academic_or_government,
        description="End client is a university, hospital, agency or consortium",
    ),
    ClassificationRule(
        reason=INVALID_PHASE,
        signal_types=lambda config: config.phase_types,
        predicate=has_invalid_phase,
        description="Pre-clinical start phase or unknown target phase",
    ),
    ClassificationRule(
        reason=UNTRUSTED_SOURCE,
        signal_types=lambda config: config.board_checked_types | config.ats_checked_types,
        predicate=has_untrusted_source,
        description="Job posting not sourced from the trusted job origin",
    ),
    ClassificationRule(
        reason=UNTRUSTED_ORIGIN,
        signal_types=lambda config: config.untrusted_origin_types,
        predicate=has_untrusted_origin,
        description="Signal type produced by an unreliable scrape path",
    ),
    ClassificationRule(
        reason=GARBAGE_TITLE,
        signal_types=lambda config: config.garbage_title_types,
        predicate=has_garbage_title,
        description="Job title is scraped page boilerplate",
    ),
)


def classify(
    signals: Iterable,
    config: RuleConfig | None = None,
    rules: Iterable[ClassificationRule] = DEFAULT_RULES,
    candidates: DeletionCandidates | None = None,
) -> DeletionCandidates:
    """Run every rule as its own pass and collect deletion candidates.

    Rules never see each other's results; a signal hit by several rules keeps
    the reason of the first rule that matched it.
    """
    config = config or RuleConfig()
    candidates = candidates if candidates is not None else DeletionCandidates()
    details = [SignalDetail.from_signal(signal) for signal in signals]
    for rule in rules:
        types = rule.signal_types(config)
        hits = 0
        for detail in details:
            if detail.signal_type not in types:
                continue
            if not rule.predicate(detail, config):
                continue
            hits += 1
            if candidates.add(detail.signal_id, rule.reason):
                logger.info(
                    "Marking %s for deletion (%s): type=%s client=%r title=%r",
                    detail.signal_id,
                    rule.reason,
                    detail.signal_type,
                    detail.end_client_name,
                    detail.job_title,
                )
        logger.info("Rule %s matched %d signals", rule.reason, hits)
    return candidates
