"""
Scoring rules for WK Poule

A ScoringRules object holds the point value of every prediction category.
Effective rules for a poule are layered: built-in defaults, then the
application's DEFAULT_SCORING_RULES, then the ``default_scoring_rules``
global setting, then the poule's own ``scoring_rules`` column.
"""

from flask import current_app

from config import BUILTIN_SCORING_RULES


class ScoringRules:
    """Point values per prediction category"""

    KEYS = tuple(BUILTIN_SCORING_RULES)

    def __init__(self, **values):
        unknown = set(values) - set(self.KEYS)
        if unknown:
            raise ValueError(f"Unknown scoring rule(s): {', '.join(sorted(unknown))}")

        self._values = dict(BUILTIN_SCORING_RULES)
        for key, value in values.items():
            self._values[key] = self._coerce(key, value)

    def __getattr__(self, name):
        values = self.__dict__.get("_values")
        if values is not None and name in values:
            return values[name]
        raise AttributeError(name)

    def __eq__(self, other):
        return isinstance(other, ScoringRules) and self._values == other._values

    def __repr__(self):
        return f"<ScoringRules {self._values}>"

    @staticmethod
    def _coerce(key, value):
        if isinstance(value, bool):
            raise ValueError(f"Scoring rule '{key}' must be a number")
        try:
            points = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Scoring rule '{key}' must be a number, got {value!r}")
        if points < 0:
            raise ValueError(f"Scoring rule '{key}' cannot be negative")
        return points

    def merged(self, overrides):
        """Return new rules with the non-null known keys of ``overrides`` applied

        Unknown keys are ignored so that a poule row carrying extra settings
        still scores.
        """
        values = dict(self._values)
        for key, value in (overrides or {}).items():
            if key in values and value is not None:
                values[key] = self._coerce(key, value)
        return ScoringRules(**values)

    def to_dict(self):
        return dict(self._values)

    @classmethod
    def from_config(cls):
        """Rules from the application config"""
        return cls().merged(current_app.config.get("DEFAULT_SCORING_RULES"))

    @classmethod
    def global_defaults(cls):
        """Rules from the config layered with the ``default_scoring_rules`` setting"""
        from wkpoule.models.global_setting import (
            DEFAULT_SCORING_RULES_KEY,
            GlobalSetting,
        )

        return cls.from_config().merged(
            GlobalSetting.get_value(DEFAULT_SCORING_RULES_KEY)
        )


def parse_rule_assignments(assignments):
    """Parse ``key=value`` strings into a validated overrides dict"""
    overrides = {}
    for assignment in assignments:
        if "=" not in assignment:
            raise ValueError(f"Expected KEY=VALUE, got '{assignment}'")
        key, value = assignment.split("=", 1)
        key = key.strip()
        if key not in ScoringRules.KEYS:
            raise ValueError(f"Unknown scoring rule '{key}'")
        overrides[key] = ScoringRules._coerce(key, value.strip())
    return overrides
