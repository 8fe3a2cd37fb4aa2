import json

import click

from esg_compliance import create_app, db
from esg_compliance.engine import ComplianceEngine
from esg_compliance.importer import import_metric_file
from esg_compliance.store import SqlMetricStore

app = create_app()


@app.cli.command("init-db")
def init_db():
    """Create database tables."""
    db.create_all()
    print("Database initialized.")


@app.cli.command("import-metrics")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def import_metrics(filepath):
    """Import metric entries from a CSV or XLSX file."""
    result = import_metric_file(filepath, SqlMetricStore())
    print(f"Imported {result['stored']} of {result['rows']} rows.")
    for error in result["errors"]:
        print(f"  line {error['line']}: {error['error']}")


@app.cli.command("score-company")
@click.argument("company_id")
@click.argument("year", type=int)
@click.option("--persist", is_flag=True, help="Store the score as a peer snapshot.")
def score_company(company_id, year, persist):
    """Print the ESG score summary for a company-year."""
    engine = ComplianceEngine(SqlMetricStore(), app.config)
    print(json.dumps(engine.score(company_id, year, persist=persist), indent=2))


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
