from datetime import datetime, timezone

from wkpoule import db

WK_RESULTS_KEY = "wk_results"
DEFAULT_SCORING_RULES_KEY = "default_scoring_rules"


class GlobalSetting(db.Model):
    """Key-value store for tournament-wide ground truth and defaults"""

    __tablename__ = "global_settings"

    id = db.Column(db.Integer, primary_key=True)
    setting_key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    setting_value = db.Column(db.JSON, nullable=True)

    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<GlobalSetting {self.setting_key}>"

    @staticmethod
    def get_value(key, default=None):
        setting = GlobalSetting.query.filter_by(setting_key=key).first()
        if setting is None or setting.setting_value is None:
            return default
        return setting.setting_value

    @staticmethod
    def set_value(key, value):
        setting = GlobalSetting.query.filter_by(setting_key=key).first()
        if setting:
            setting.setting_value = value
        else:
            setting = GlobalSetting(setting_key=key, setting_value=value)
            db.session.add(setting)
        return setting

    @staticmethod
    def get_wk_results():
        """Return ``(winner, finalist)``; either may be None"""
        results = GlobalSetting.get_value(WK_RESULTS_KEY) or {}
        return results.get("winner") or None, results.get("finalist") or None

    @staticmethod
    def set_wk_results(winner, finalist=None):
        value = {"winner": winner}
        if finalist:
            value["finalist"] = finalist
        return GlobalSetting.set_value(WK_RESULTS_KEY, value)
