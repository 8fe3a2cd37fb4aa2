"""
ComplianceEngine: wires a metric store and scoring configuration to the
pure validation, mapping, scoring and benchmarking functions.

One engine per request or CLI call; it holds no state beyond its store and
configuration.
"""

import logging

from esg_compliance import benchmarking, mapper, scoring
from esg_compliance.exceptions import InputShapeError, ReferenceDataError
from esg_compliance.records import (
    entries_to_submission, is_filled, operational_type, require_identity, submission_to_entries,
)
from esg_compliance.validation import perform_full_validation

logger = logging.getLogger(__name__)

DASHBOARD_FRAMEWORKS = ("GRI", "SASB", "TCFD", "BRSR")


class ComplianceEngine:

    def __init__(self, store, config=None):
        config = config or {}
        self.store = store
        self.scoring_config = scoring.build_scoring_config(config)
        self.min_peers = config.get("BENCHMARK_MIN_PEERS", 5)

    # -- data entry ---------------------------------------------------------

    def submit(self, submission):
        """Validate a submission, store it as metric entries and return the validation."""
        company_id, year = require_identity(submission)
        entries = submission_to_entries(submission)
        validation = perform_full_validation(submission)
        stored = self.store.save_entries(entries)
        profile = {k: submission.get(k) for k in ("company_name", "sector", "region")}
        if any(v is not None for v in profile.values()):
            self.store.save_profile(company_id, profile)
        logger.info(
            f"Submission for company {company_id} {year}: {stored} entries, "
            f"{validation['summary']['total_errors']} errors"
        )
        return {"stored": stored, "validation": validation}

    def record_operational(self, record_type, records):
        """Store waste, air, workforce, safety incident or ethics records."""
        if isinstance(records, dict):
            records = [records]
        if not isinstance(records, list) or not records:
            raise InputShapeError("Operational records must be an object or a non-empty list of objects")
        record_type = operational_type(record_type)
        stored = self.store.save_operational_records(record_type, records)
        logger.info(f"Recorded {stored} {record_type} records")
        return {"record_type": record_type, "stored": stored}

    def operational(self, record_type, company_id, reporting_year):
        record_type = operational_type(record_type)
        return self.store.operational_records(company_id, reporting_year)[record_type]

    def submission(self, company_id, reporting_year):
        """Latest-wins nested submission rebuilt from stored entries."""
        return entries_to_submission(
            self.store.entries(company_id, reporting_year),
            str(company_id), int(reporting_year),
            self.store.company_profile(company_id),
        )

    def validate(self, company_id, reporting_year):
        return perform_full_validation(self.submission(company_id, reporting_year))

    # -- frameworks ---------------------------------------------------------

    def _framework_inputs(self, company_id, reporting_year):
        year = int(reporting_year)
        entries = self.store.entries(company_id, year)
        prior = self.store.entries(company_id, year - 1)
        validation = self.validate(company_id, year)
        return entries, prior, validation

    def framework_compliance(self, framework_id, company_id, reporting_year, persist=False,
                             _inputs=None):
        entries, prior, validation = _inputs or self._framework_inputs(company_id, reporting_year)
        result = mapper.framework_compliance(
            entries, framework_id, prior, validation["alerts"],
            company_id=str(company_id), reporting_year=int(reporting_year),
        )
        if persist:
            self.store.save_compliance_records(result["records"])
            logger.info(
                f"Cached {len(result['records'])} {result['framework']} records "
                f"for company {company_id} {reporting_year}"
            )
        return result

    def framework_report(self, framework_id, company_id, reporting_year, industry=None):
        entries, prior, validation = self._framework_inputs(company_id, reporting_year)
        if industry is None:
            profile = self.store.company_profile(company_id) or {}
            industry = profile.get("sector") or None
        return mapper.generate_framework_report(entries, framework_id, industry, prior, validation["alerts"])

    # -- scoring ------------------------------------------------------------

    def _records(self, company_id, reporting_year):
        records = self.store.operational_records(company_id, reporting_year)
        records["entries"] = self.store.entries(company_id, reporting_year)
        return records

    @staticmethod
    def _has_data(records):
        if any(records.get(key) for key in ("waste", "air", "workforce", "safety_incidents", "ethics")):
            return True
        return any(is_filled(e.get("value")) for e in records.get("entries", []))

    def score(self, company_id, reporting_year, persist=False, sector=None):
        year = int(reporting_year)
        prior_records = self._records(company_id, year - 1)
        prior_composite = None
        if self._has_data(prior_records):
            prior_composite = scoring.score(company_id, year - 1, prior_records, self.scoring_config)["composite"]

        summary = scoring.score(
            company_id, year, self._records(company_id, year), self.scoring_config, prior_composite
        )
        if persist:
            self.store.save_snapshot(summary, sector or self._sector(company_id))
        return summary

    # -- benchmarking -------------------------------------------------------

    def _sector(self, company_id):
        profile = self.store.company_profile(company_id) or {}
        return profile.get("sector") or None

    def benchmark(self, company_id, reporting_year, sector=None, summary=None):
        sector = sector or self._sector(company_id)
        summary = summary or self.score(company_id, reporting_year)
        peers = self.store.peer_composites(sector, reporting_year, exclude_company_id=company_id) if sector else []
        return benchmarking.benchmark(summary, sector, peers, self.min_peers)

    def dashboard(self, company_id, reporting_year=None, sector=None, frameworks=DASHBOARD_FRAMEWORKS):
        """KPI view: scores, framework compliance, benchmark and critical alerts."""
        if reporting_year is None:
            reporting_year = self.store.latest_year(company_id)
            if reporting_year is None:
                raise ReferenceDataError(f"No reporting data for company {company_id}")
        year = int(reporting_year)

        inputs = self._framework_inputs(company_id, year)
        validation = inputs[2]
        results = [self.framework_compliance(fid, company_id, year, _inputs=inputs) for fid in frameworks]
        records = [r for result in results for r in result["records"]]

        summary = self.score(company_id, year)
        bench = self.benchmark(company_id, year, sector, summary)
        summary["industry_percentile"] = bench["percentile"]

        if validation["critical"]:
            logger.warning(
                f"Dashboard for company {company_id} {year} carries "
                f"{len(validation['critical'])} critical alerts"
            )
        return benchmarking.build_dashboard(summary, results, records, bench, validation)
