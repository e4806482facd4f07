# perchfinder/api/recommendations/schemas.py
"""
Schemas for the advice endpoint.

Every field of the statistics payload is type- and range-checked; unknown
fields are rejected (marshmallow's default RAISE).
"""
from marshmallow import Schema, fields, validate, validates, validates_schema, ValidationError

from perchfinder.engine.labels import TIME_BUCKETS
from perchfinder.utils.datetime_utils import DateTimeUtils

MAX_COUNT = 50000
TEMPERATURE_RANGE = validate.Range(min=-50, max=60)
PRESSURE_RANGE = validate.Range(min=850, max=1150)
TIME_OF_DAY = validate.OneOf(TIME_BUCKETS)


class StrictFloat(fields.Float):
    """Float that refuses numeric strings ("12.5"): only JSON numbers are accepted."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, str):
            raise self.make_error("invalid")
        return super()._deserialize(value, attr, data, **kwargs)


def _label_list(max_items: int, max_length: int) -> fields.List:
    return fields.List(
        fields.Str(validate=validate.Length(min=1, max=max_length)),
        required=True,
        validate=validate.Length(max=max_items),
    )


class GeneralStatsSchema(Schema):
    """Water-wide statistics."""
    topLures = _label_list(4, 120)
    topLureCategories = _label_list(4, 60)
    topMethods = _label_list(4, 80)
    topJigMethods = _label_list(4, 80)
    bestTimeOfDay = fields.Str(required=True, validate=TIME_OF_DAY)
    avgTempC = StrictFloat(required=True, allow_none=True, validate=TEMPERATURE_RANGE)
    commonWeather = fields.Str(required=True, allow_none=True, validate=validate.Length(min=1, max=60))
    avgPressureHpa = StrictFloat(required=True, allow_none=True, validate=PRESSURE_RANGE)


class CurrentConditionsSchema(Schema):
    """Live weather snapshot at request time."""
    observedAtIso = fields.Str(required=True, validate=validate.Length(min=10, max=40))
    weatherSummary = fields.Str(required=True, allow_none=True, validate=validate.Length(min=1, max=60))
    weatherCode = fields.Int(required=True, allow_none=True, strict=True, validate=validate.Range(min=0, max=99))
    temperatureC = StrictFloat(required=True, allow_none=True, validate=TEMPERATURE_RANGE)
    pressureHpa = StrictFloat(required=True, allow_none=True, validate=PRESSURE_RANGE)
    timeOfDay = fields.Str(required=True, validate=TIME_OF_DAY)

    @validates('observedAtIso')
    def validate_observed_at(self, value, **kwargs):
        if not DateTimeUtils.is_valid_iso(value):
            raise ValidationError("observedAtIso must be an ISO-8601 date.")


class SimilarStatsSchema(Schema):
    """Statistics of the catches most similar to the current conditions."""
    topLures = _label_list(3, 120)
    topLureCategories = _label_list(3, 60)
    topMethods = _label_list(3, 80)
    topJigMethods = _label_list(3, 80)
    topTimesOfDay = fields.List(fields.Str(validate=TIME_OF_DAY), required=True, validate=validate.Length(max=2))
    commonWeather = fields.Str(required=True, allow_none=True, validate=validate.Length(min=1, max=60))
    avgTempC = StrictFloat(required=True, allow_none=True, validate=TEMPERATURE_RANGE)
    avgPressureHpa = StrictFloat(required=True, allow_none=True, validate=PRESSURE_RANGE)
    comparedCatchCount = fields.Int(required=True, strict=True, validate=validate.Range(min=0, max=MAX_COUNT))
    matchedCatchCount = fields.Int(required=True, strict=True, validate=validate.Range(min=0, max=MAX_COUNT))

    @validates_schema
    def validate_counts(self, data, **kwargs):
        if data.get('matchedCatchCount', 0) > data.get('comparedCatchCount', 0):
            raise ValidationError("matchedCatchCount cannot exceed comparedCatchCount.", "matchedCatchCount")


class WaterStatsPayloadSchema(Schema):
    waterName = fields.Str(required=True, validate=validate.Length(min=1, max=120))
    totalCatches = fields.Int(required=True, strict=True, validate=validate.Range(min=0, max=MAX_COUNT))
    general = fields.Nested(GeneralStatsSchema, required=True)
    currentConditions = fields.Nested(CurrentConditionsSchema, allow_none=True)
    similarWhenLikeNow = fields.Nested(SimilarStatsSchema, allow_none=True)

    @validates_schema
    def validate_sections(self, data, **kwargs):
        if data.get('similarWhenLikeNow') and not data.get('currentConditions'):
            raise ValidationError("similarWhenLikeNow requires currentConditions.", "similarWhenLikeNow")
        similar = data.get('similarWhenLikeNow')
        if similar and similar.get('comparedCatchCount', 0) > data.get('totalCatches', 0):
            raise ValidationError("comparedCatchCount cannot exceed totalCatches.", "similarWhenLikeNow")


class AdviceRequestSchema(Schema):
    """POST / request body."""
    stats = fields.Nested(WaterStatsPayloadSchema, required=True)


class AdviceResponseSchema(Schema):
    recommendation = fields.Str(required=True)
