"""
Scorecard service: the read, write and delete paths over agent scorecards.

Every operation validates its input, then authorizes the caller, and only
then touches the cache or the metric store. Writes invalidate the agent's
cached views inside the transaction and once more after the commit, so a
read racing the write cannot leave a stale view behind.
"""

from contextlib import contextmanager
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from scorecard_engine.core.exceptions import (
    ResourceNotFoundError,
    ValidationError,
    create_validation_error,
)
from scorecard_engine.core.logging import get_logger
from scorecard_engine.models.enums import MetricScheme
from scorecard_engine.repositories.agent_metric_repository import AgentMetricRepository
from scorecard_engine.repositories.user_repository import UserRepository
from scorecard_engine.schemas.scorecard import (
    MAX_YEAR,
    MIN_YEAR,
    AgentMetricResponse,
    AgentSummary,
    MetricCatalogue,
    MetricCatalogueEntry,
    PerformanceSummary,
    ScorecardDeleteResponse,
    ScorecardResponse,
    ScorecardUpsertRequest,
)
from scorecard_engine.services.scorecard.access import (
    AccessAction,
    AccessControlResolver,
    Principal,
)
from scorecard_engine.services.scorecard.analyzer import (
    performance_window,
    previous_period,
    trend,
    yearly_average,
)
from scorecard_engine.services.scorecard.cache import ScorecardCache
from scorecard_engine.services.scorecard.calculator import (
    ScoreResult,
    ScoringInput,
    resolve_input,
    resolve_weights,
    score,
)
from scorecard_engine.services.scorecard.constants import (
    LEGACY_METRIC_FIELDS,
    METRIC_CATEGORIES,
    METRIC_DESCRIPTIONS,
    METRIC_LABELS,
    RAW_COUNTER_FIELDS,
    RAW_DEFAULT_WEIGHTS,
    RAW_METRIC_FIELDS,
    WEIGHT_SUFFIX,
    impact_level,
)


class ScorecardService:
    """
    Orchestrates access control, scoring, persistence and caching.

    One instance is bound to one database session (one request).
    """

    def __init__(
        self,
        db: Session,
        cache: ScorecardCache,
        *,
        resolver: Optional[AccessControlResolver] = None,
        history_limit: int = 6,
    ):
        """
        Initialize scorecard service.

        Args:
            db: Request-scoped database session
            cache: Scorecard view cache
            resolver: Access resolver (defaults to one backed by the user table)
            history_limit: Number of periods in the performance summary
        """
        self.db = db
        self.cache = cache
        self.metrics = AgentMetricRepository(db)
        self.users = UserRepository(db)
        self.resolver = resolver or AccessControlResolver(self.users)
        self.history_limit = history_limit
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self):
        """Commit on success, roll back and re-raise on any failure."""
        try:
            yield self.db
            self.db.commit()
        except Exception as e:
            self._rollback()
            self._logger.error(f"Transaction failed: {type(e).__name__}")
            raise

    def _rollback(self) -> None:
        try:
            self.db.rollback()
        except Exception as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_period(year: Any, month: Any = None, month_required: bool = False) -> None:
        field_errors: Dict[str, list] = {}
        if not isinstance(year, int) or isinstance(year, bool):
            field_errors["year"] = ["year is required and must be an integer"]
        elif not MIN_YEAR <= year <= MAX_YEAR:
            field_errors["year"] = [f"year must be between {MIN_YEAR} and {MAX_YEAR}"]

        if month is None:
            if month_required:
                field_errors["month"] = ["month is required"]
        elif not isinstance(month, int) or isinstance(month, bool):
            field_errors["month"] = ["month must be an integer"]
        elif not 1 <= month <= 12:
            field_errors["month"] = ["month must be between 1 and 12"]

        if field_errors:
            raise create_validation_error(field_errors)

    @staticmethod
    def _parse_upsert(
        payload: Union[ScorecardUpsertRequest, Mapping[str, Any]],
    ) -> ScorecardUpsertRequest:
        if isinstance(payload, ScorecardUpsertRequest):
            return payload
        try:
            return ScorecardUpsertRequest.model_validate(payload)
        except PydanticValidationError as e:
            field_errors: Dict[str, list] = {}
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"]) or "body"
                field_errors.setdefault(location, []).append(error["msg"])
            raise ValidationError("Invalid scorecard payload", field_errors=field_errors) from e

    # -------------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------------

    def get_scorecard(
        self,
        principal: Optional[Principal],
        agent_id: str,
        year: int,
        month: Optional[int] = None,
    ) -> ScorecardResponse:
        """
        Return an agent's scorecards for a year, or for one month of it.

        Monthly views carry ``trends`` when the previous period has a record;
        yearly views carry ``yearly_average`` when at least one record exists.

        Args:
            principal: Authenticated caller
            agent_id: Agent whose scorecard is requested
            year: Calendar year
            month: Optional month (1-12) for a monthly view

        Returns:
            ScorecardResponse

        Raises:
            ValidationError: Invalid year or month
            AuthenticationError: No principal
            AuthorizationError: Caller may not view this agent
        """
        self._validate_period(year, month)
        self.resolver.require(principal, agent_id, AccessAction.VIEW)

        key = self.cache.scorecard_key(agent_id, year, month)
        cached = self.cache.get(key)
        if cached is not None:
            return ScorecardResponse.model_validate(cached)

        response = self._build_scorecard(agent_id, year, month)
        self.cache.set(key, response.model_dump(mode="json"))

        self._logger.info(
            "Fetched scorecard",
            extra={
                "agent_id": agent_id,
                "year": year,
                "month": month,
                "record_count": len(response.metrics),
            },
        )
        return response

    def _build_scorecard(
        self,
        agent_id: str,
        year: int,
        month: Optional[int],
    ) -> ScorecardResponse:
        agent = self.users.find_by_id(agent_id)
        if agent is None:
            # The agent vanished between authorization and the read
            raise ResourceNotFoundError("Agent", agent_id)

        records = self.metrics.find_many(agent_id, year=year, month=month)

        trends = None
        averages = None
        if month is not None:
            if records:
                prev_month, prev_year = previous_period(month, year)
                previous = self.metrics.find_by_natural_key(agent_id, prev_month, prev_year)
                trends = trend(records[0], previous)
        elif records:
            averages = yearly_average(records)

        return ScorecardResponse(
            agent=AgentSummary.model_validate(agent),
            year=year,
            month=month,
            metrics=[AgentMetricResponse.model_validate(record) for record in records],
            trends=trends,
            yearly_average=averages,
        )

    def get_performance_summary(
        self,
        principal: Optional[Principal],
        agent_id: str,
    ) -> PerformanceSummary:
        """
        Summarize the agent's most recent periods (newest first).

        Args:
            principal: Authenticated caller
            agent_id: Agent to summarize

        Returns:
            PerformanceSummary over the last ``history_limit`` records
        """
        self.resolver.require(principal, agent_id, AccessAction.VIEW)

        key = self.cache.summary_key(agent_id, self.history_limit)
        cached = self.cache.get(key)
        if cached is not None:
            return PerformanceSummary.model_validate(cached)

        records = self.metrics.latest(agent_id, self.history_limit)
        summary = PerformanceSummary(agent_id=agent_id, **performance_window(records))
        self.cache.set(key, summary.model_dump(mode="json"))
        return summary

    # -------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------

    def upsert_scorecard(
        self,
        principal: Optional[Principal],
        agent_id: str,
        payload: Union[ScorecardUpsertRequest, Mapping[str, Any]],
    ) -> AgentMetricResponse:
        """
        Create or replace the scorecard for ``(agent_id, month, year)``.

        Args:
            principal: Authenticated caller
            agent_id: Agent being scored
            payload: Upsert request or its dict form

        Returns:
            The stored record

        Raises:
            ValidationError: Bad period, or not exactly one of raw_data / legacy_metrics
            AuthorizationError: Caller may not modify this agent
            ComputationError: Score arithmetic produced a non-finite value
            CacheError: Cached views could not be invalidated; the write must be retried
        """
        request = self._parse_upsert(payload)
        self.resolver.require(principal, agent_id, AccessAction.MODIFY)

        scoring = resolve_input(request.scorecard_input, request.weights)
        result = score(scoring.metrics, scoring.weights, scoring.scheme)
        values = self._record_values(scoring, result, request.notes)

        with self.transaction():
            record = self.metrics.upsert(agent_id, request.month, request.year, values)
            self.cache.invalidate_agent(agent_id)

        # A read between the first invalidation and the commit may have cached the old rows
        self.cache.invalidate_agent(agent_id)

        self._logger.info(
            "Saved scorecard",
            extra={
                "agent_id": agent_id,
                "month": request.month,
                "year": request.year,
                "scheme": scoring.scheme.value,
                "percentage": result.percentage,
                "modified_by": principal.user_id,
            },
        )
        return AgentMetricResponse.model_validate(record)

    @staticmethod
    def _record_values(
        scoring: ScoringInput,
        result: ScoreResult,
        notes: Optional[str],
    ) -> Dict[str, Any]:
        """Full column set for a record; the inactive scheme's sub-metrics are cleared."""
        values: Dict[str, Any] = {field: None for field in LEGACY_METRIC_FIELDS + RAW_METRIC_FIELDS}
        values.update({field: None for field in RAW_COUNTER_FIELDS})

        for scheme in MetricScheme:
            weights = scoring.weights if scheme == scoring.scheme else resolve_weights(None, scheme)
            for metric, weight in weights.items():
                values[f"{metric}{WEIGHT_SUFFIX}"] = weight

        if scoring.scheme == MetricScheme.LEGACY:
            values.update({metric: int(value) for metric, value in scoring.metrics.items()})
        else:
            values.update(scoring.metrics)
            values.update(scoring.raw_counters)

        values.update(
            scheme=scoring.scheme.value,
            total_score=result.total_score,
            percentage=result.percentage,
            notes=notes,
        )
        return values

    def delete_scorecard(
        self,
        principal: Optional[Principal],
        agent_id: str,
        month: int,
        year: int,
    ) -> ScorecardDeleteResponse:
        """
        Delete the scorecard for ``(agent_id, month, year)``.

        Raises:
            ValidationError: Bad period
            AuthorizationError: Caller may not delete scorecards of this agent
            ResourceNotFoundError: No record for the period
            CacheError: Cached views could not be invalidated; the delete must be retried
        """
        self._validate_period(year, month, month_required=True)
        self.resolver.require(principal, agent_id, AccessAction.DELETE)

        if self.metrics.find_by_natural_key(agent_id, month, year) is None:
            raise ResourceNotFoundError(
                "Scorecard",
                message=f"No scorecard for agent {agent_id} in {year}-{month:02d}",
            )

        with self.transaction():
            self.metrics.delete_by_natural_key(agent_id, month, year)
            self.cache.invalidate_agent(agent_id)

        self.cache.invalidate_agent(agent_id)

        self._logger.info(
            "Deleted scorecard",
            extra={
                "agent_id": agent_id,
                "month": month,
                "year": year,
                "deleted_by": principal.user_id,
            },
        )
        return ScorecardDeleteResponse(agent_id=agent_id, month=month, year=year)

    # -------------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------------

    @staticmethod
    def get_metric_catalogue() -> MetricCatalogue:
        entries = []
        for category, metrics in METRIC_CATEGORIES.items():
            for metric in metrics:
                weight = RAW_DEFAULT_WEIGHTS[metric]
                entries.append(
                    MetricCatalogueEntry(
                        key=metric,
                        label=METRIC_LABELS[metric],
                        description=METRIC_DESCRIPTIONS[metric],
                        category=category,
                        default_weight=weight,
                        impact=impact_level(weight),
                    )
                )
        return MetricCatalogue(
            metrics=entries,
            categories={category: list(metrics) for category, metrics in METRIC_CATEGORIES.items()},
        )
