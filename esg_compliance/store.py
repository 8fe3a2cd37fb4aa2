"""
Metric Store Adapter

Everything the engine reads or writes goes through a store. Two
implementations share one interface:

- InMemoryMetricStore: plain lists, for scripts and tests
- SqlMetricStore: Flask-SQLAlchemy models, used by the web app

Company ids are kept as strings in both, so URL path values and JSON
submissions compare equal.
"""

import logging
from datetime import datetime, timezone

from esg_compliance.records import OPERATIONAL_FIELDS, normalize_entry, normalize_operational_record, operational_type

logger = logging.getLogger(__name__)

OPERATIONAL_KEYS = tuple(OPERATIONAL_FIELDS)


class MetricStore:
    """Interface shared by the store implementations."""

    def entries(self, company_id, reporting_year):
        """Metric entries for one company-year, oldest submission first."""
        raise NotImplementedError

    def operational_records(self, company_id, reporting_year):
        """{waste, air, workforce, safety_incidents, ethics} lists of dicts."""
        raise NotImplementedError

    def company_profile(self, company_id):
        raise NotImplementedError

    def save_profile(self, company_id, profile):
        """Create or update company name, sector and region."""
        raise NotImplementedError

    def latest_year(self, company_id):
        raise NotImplementedError

    def peer_composites(self, sector, reporting_year, exclude_company_id=None):
        """Latest composite per peer company in a sector and year."""
        raise NotImplementedError

    def save_entries(self, entries, source="api"):
        raise NotImplementedError

    def save_operational_records(self, record_type, records):
        """Append waste, air, workforce, safety or ethics records. Returns the count."""
        raise NotImplementedError

    def save_snapshot(self, summary, sector=None):
        """Create or replace the snapshot for the summary's company-year."""
        raise NotImplementedError

    def save_compliance_records(self, records):
        raise NotImplementedError


def _stored_entry(raw):
    entry = normalize_entry(raw)
    entry["company_id"] = str(entry["company_id"])
    return entry


class InMemoryMetricStore(MetricStore):

    def __init__(self, entries=None, operational=None, profiles=None, snapshots=None):
        self._entries = [_stored_entry(e) for e in entries or []]
        # {(company_id, year): {"waste": [...], ...}}
        self._operational = {
            (str(cid), int(year)): records for (cid, year), records in (operational or {}).items()
        }
        self._profiles = {str(k): v for k, v in (profiles or {}).items()}
        self._snapshots = list(snapshots or [])
        self.compliance_records = []

    def entries(self, company_id, reporting_year):
        cid, year = str(company_id), int(reporting_year)
        return [dict(e) for e in self._entries if e["company_id"] == cid and e["reporting_year"] == year]

    def operational_records(self, company_id, reporting_year):
        records = self._operational.get((str(company_id), int(reporting_year)), {})
        return {key: list(records.get(key, [])) for key in OPERATIONAL_KEYS}

    def company_profile(self, company_id):
        return self._profiles.get(str(company_id))

    def save_profile(self, company_id, profile):
        current = self._profiles.setdefault(str(company_id), {"company_id": str(company_id)})
        current.update({k: v for k, v in profile.items() if v is not None})
        return dict(current)

    def latest_year(self, company_id):
        cid = str(company_id)
        years = [e["reporting_year"] for e in self._entries if e["company_id"] == cid]
        years += [year for (c, year) in self._operational if c == cid]
        return max(years) if years else None

    def peer_composites(self, sector, reporting_year, exclude_company_id=None):
        latest = {}
        for snap in self._snapshots:
            if (str(snap.get("sector") or "").lower() == str(sector or "").lower()
                    and snap["reporting_year"] == int(reporting_year)
                    and str(snap["company_id"]) != str(exclude_company_id)):
                latest[str(snap["company_id"])] = snap["composite"]
        return list(latest.values())

    def save_entries(self, entries, source="api"):
        stored = [_stored_entry(e) for e in entries]
        self._entries.extend(stored)
        return len(stored)

    def save_operational_records(self, record_type, records):
        record_type = operational_type(record_type)
        rows = [normalize_operational_record(record_type, raw) for raw in records]
        for company_id, year, fields in rows:
            bucket = self._operational.setdefault((company_id, year), {})
            bucket.setdefault(record_type, []).append(fields)
        return len(rows)

    def save_snapshot(self, summary, sector=None):
        snap = {key: summary[key] for key in (
            "company_id", "reporting_year", "environmental", "social", "governance",
            "composite", "rating", "confidence")}
        snap["company_id"] = str(snap["company_id"])
        snap["sector"] = sector or ""
        self._snapshots = [
            s for s in self._snapshots
            if (str(s["company_id"]), s["reporting_year"]) != (snap["company_id"], snap["reporting_year"])
        ]
        self._snapshots.append(snap)
        return snap

    def save_compliance_records(self, records):
        self.compliance_records.extend(records)
        return len(records)


class SqlMetricStore(MetricStore):

    def __init__(self, session=None):
        from esg_compliance import db
        self.session = session or db.session

    def entries(self, company_id, reporting_year):
        from esg_compliance.models import MetricEntry
        rows = (
            MetricEntry.query
            .filter_by(company_id=str(company_id), reporting_year=int(reporting_year))
            .order_by(MetricEntry.submitted_at, MetricEntry.id)
            .all()
        )
        return [row.to_entry() for row in rows]

    def operational_records(self, company_id, reporting_year):
        from esg_compliance.models import OPERATIONAL_MODELS
        return {
            key: [
                row.to_dict() for row in model.query.filter_by(
                    company_id=str(company_id), reporting_year=int(reporting_year)
                ).order_by(model.id).all()
            ]
            for key, model in OPERATIONAL_MODELS.items()
        }

    def company_profile(self, company_id):
        from esg_compliance.models import CompanyProfile
        profile = CompanyProfile.query.filter_by(company_id=str(company_id)).first()
        return profile.to_dict() if profile else None

    def save_profile(self, company_id, profile):
        from esg_compliance.models import CompanyProfile
        row = CompanyProfile.query.filter_by(company_id=str(company_id)).first()
        if row is None:
            row = CompanyProfile(company_id=str(company_id))
            self.session.add(row)
        if profile.get("company_name") is not None:
            row.name = profile["company_name"]
        if profile.get("sector") is not None:
            row.sector = str(profile["sector"]).lower()
        if profile.get("region") is not None:
            row.region = profile["region"]
        self.session.commit()
        return row.to_dict()

    def latest_year(self, company_id):
        from esg_compliance.models import MetricEntry, OPERATIONAL_MODELS
        years = []
        for model in [MetricEntry] + list(OPERATIONAL_MODELS.values()):
            row = (
                model.query.filter_by(company_id=str(company_id))
                .order_by(model.reporting_year.desc())
                .first()
            )
            if row:
                years.append(row.reporting_year)
        return max(years) if years else None

    def peer_composites(self, sector, reporting_year, exclude_company_id=None):
        from esg_compliance.models import ScoreSnapshot
        query = ScoreSnapshot.query.filter(
            ScoreSnapshot.sector == str(sector or "").lower(),
            ScoreSnapshot.reporting_year == int(reporting_year),
        )
        if exclude_company_id is not None:
            query = query.filter(ScoreSnapshot.company_id != str(exclude_company_id))
        latest = {}
        for snap in query.order_by(ScoreSnapshot.created_at, ScoreSnapshot.id).all():
            latest[snap.company_id] = snap.composite
        return list(latest.values())

    def save_entries(self, entries, source="api"):
        from esg_compliance.models import MetricEntry
        rows = [MetricEntry.from_entry(_stored_entry(e), source=source) for e in entries]
        self.session.add_all(rows)
        self.session.commit()
        logger.info(f"Stored {len(rows)} metric entries ({source})")
        return len(rows)

    def save_operational_records(self, record_type, records):
        from esg_compliance.models import OPERATIONAL_MODELS
        record_type = operational_type(record_type)
        model = OPERATIONAL_MODELS[record_type]
        rows = []
        for raw in records:
            company_id, year, fields = normalize_operational_record(record_type, raw)
            rows.append(model(company_id=company_id, reporting_year=year, **fields))
        self.session.add_all(rows)
        self.session.commit()
        logger.info(f"Stored {len(rows)} {record_type} records")
        return len(rows)

    def save_snapshot(self, summary, sector=None):
        from esg_compliance.models import ScoreSnapshot
        company_id = str(summary["company_id"])
        snap = ScoreSnapshot.query.filter_by(
            company_id=company_id, reporting_year=summary["reporting_year"]
        ).first()
        if snap is None:
            snap = ScoreSnapshot(company_id=company_id, reporting_year=summary["reporting_year"])
            self.session.add(snap)
        snap.sector = str(sector or "").lower()
        snap.environmental = summary["environmental"]
        snap.social = summary["social"]
        snap.governance = summary["governance"]
        snap.composite = summary["composite"]
        snap.rating = summary["rating"]
        snap.confidence = summary["confidence"]
        snap.created_at = datetime.now(timezone.utc)
        self.session.commit()
        return snap.to_dict()

    def save_compliance_records(self, records):
        from esg_compliance.models import ComplianceRecordRow
        self.session.add_all([ComplianceRecordRow.from_record(r) for r in records])
        self.session.commit()
        return len(records)
