from datetime import datetime, timezone

from wkpoule import db

SCORING_KINDS = ("matches", "topscorers", "groups", "winner")


class ScoringRun(db.Model):
    """Audit row for one invocation of a scoring pass"""

    __tablename__ = "scoring_runs"

    id = db.Column(db.Integer, primary_key=True)

    kind = db.Column(db.String(20), nullable=False)
    trigger = db.Column(db.String(20), nullable=False, default="api")  # 'api', 'cli'
    status = db.Column(
        db.String(20), nullable=False, default="running"
    )  # 'running', 'success', 'noop', 'failed'

    predictions_updated = db.Column(db.Integer, nullable=False, default=0)
    write_failures = db.Column(db.Integer, nullable=False, default=0)
    poules_processed = db.Column(db.Integer, nullable=False, default=0)

    result = db.Column(db.JSON, nullable=True)
    error_message = db.Column(db.String(500), nullable=True)

    started_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    finished_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.Index("idx_scoring_run_kind", "kind"),
        db.Index("idx_scoring_run_started", "started_at"),
    )

    def __repr__(self):
        return f"<ScoringRun {self.kind} {self.status}>"

    @staticmethod
    def start(kind, trigger="api"):
        """Open an audit row and commit it so it survives a failing pass"""
        run = ScoringRun(kind=kind, trigger=trigger, status="running")
        db.session.add(run)
        db.session.commit()
        return run

    def finish(self, status, result=None, predictions_updated=0, write_failures=0,
               poules_processed=0, error_message=None):
        self.status = status
        self.result = result
        self.predictions_updated = predictions_updated
        self.write_failures = write_failures
        self.poules_processed = poules_processed
        self.error_message = error_message[:500] if error_message else None
        self.finished_at = datetime.now(timezone.utc)
        db.session.add(self)
        db.session.commit()

    @staticmethod
    def get_recent(limit=20, kind=None):
        query = ScoringRun.query
        if kind:
            query = query.filter_by(kind=kind)
        return query.order_by(ScoringRun.id.desc()).limit(limit).all()

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "trigger": self.trigger,
            "status": self.status,
            "predictions_updated": self.predictions_updated,
            "write_failures": self.write_failures,
            "poules_processed": self.poules_processed,
            "result": self.result,
            "error": self.error_message,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
