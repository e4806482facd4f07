# perchfinder/api/lures/schemas.py
from marshmallow import Schema, fields, validate


class LureSchema(Schema):
    """Lure catalog entry."""
    id = fields.Str(allow_none=True)
    brand = fields.Str(required=True, validate=validate.Length(min=1, max=60))
    name = fields.Str(required=True, validate=validate.Length(min=1, max=80))
    size = fields.Str(required=True, validate=validate.Length(max=30))
    color = fields.Str(required=True, validate=validate.Length(max=60))
    category = fields.Str(allow_none=True, validate=validate.Length(max=60))
    type = fields.Str(allow_none=True, validate=validate.Length(max=60))


class LureListSchema(Schema):
    lures = fields.List(fields.Nested(LureSchema), required=True)
    total_count = fields.Int(required=True, validate=validate.Range(min=0))
