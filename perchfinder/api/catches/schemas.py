# perchfinder/api/catches/schemas.py
from marshmallow import Schema, fields, validate, validates, ValidationError, pre_load

from perchfinder.models.catch import MAX_WEIGHT_G, MAX_LENGTH_CM
from perchfinder.utils.datetime_utils import DateTimeUtils


class CatchCreateSchema(Schema):
    """
    Body of POST /api/waters/<water_id>/catches (camelCase).
    The weather fields are optional; the server fills them in when missing.
    """
    caughtAt = fields.Str(required=True)
    weightG = fields.Float(allow_none=True, validate=validate.Range(min=0, max=MAX_WEIGHT_G))
    lengthCm = fields.Float(allow_none=True, validate=validate.Range(min=0, max=MAX_LENGTH_CM))
    lureId = fields.Str(allow_none=True, validate=validate.Length(max=120))
    method = fields.Str(allow_none=True, validate=validate.Length(max=60))
    notes = fields.Str(allow_none=True, validate=validate.Length(max=500))
    weatherCode = fields.Int(allow_none=True, strict=True, validate=validate.Range(min=0, max=99))
    weatherSummary = fields.Str(allow_none=True, validate=validate.Length(max=60))
    temperatureC = fields.Float(allow_none=True, validate=validate.Range(min=-50, max=60))
    pressureHpa = fields.Float(allow_none=True, validate=validate.Range(min=850, max=1150))

    @pre_load
    def strip_blank_strings(self, data, **kwargs):
        # Form clients send "" for untouched optional fields
        if not isinstance(data, dict):
            return data
        return {key: (None if isinstance(value, str) and not value.strip() and key != 'caughtAt' else value)
                for key, value in data.items()}

    @validates('caughtAt')
    def validate_caught_at(self, value, **kwargs):
        if not DateTimeUtils.is_valid_iso(value):
            raise ValidationError("caughtAt must be an ISO 8601 timestamp.")


class LureDumpSchema(Schema):
    id = fields.Str(allow_none=True)
    brand = fields.Str()
    name = fields.Str()
    size = fields.Str()
    color = fields.Str()
    category = fields.Str(allow_none=True)
    type = fields.Str(allow_none=True)


class CatchSchema(Schema):
    """Catch as returned by the API."""
    id = fields.Str(allow_none=True)
    waterId = fields.Str(required=True)
    caughtAt = fields.Str(required=True)
    weightG = fields.Float(allow_none=True)
    lengthCm = fields.Float(allow_none=True)
    lure = fields.Nested(LureDumpSchema, allow_none=True)
    method = fields.Str(allow_none=True)
    weatherCode = fields.Int(allow_none=True)
    weatherSummary = fields.Str(allow_none=True)
    temperatureC = fields.Float(allow_none=True)
    pressureHpa = fields.Float(allow_none=True)
    notes = fields.Str(allow_none=True)
    userId = fields.Str(allow_none=True)
    userName = fields.Str(allow_none=True)


class WaterSchema(Schema):
    id = fields.Str(required=True)
    name = fields.Str(required=True)
    location = fields.Dict(allow_none=True)


class CatchListSchema(Schema):
    water = fields.Nested(WaterSchema, required=True)
    catches = fields.List(fields.Nested(CatchSchema), required=True)
    total_count = fields.Int(required=True)
