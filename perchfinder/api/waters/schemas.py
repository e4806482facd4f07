# perchfinder/api/waters/schemas.py
from marshmallow import Schema, fields, validate, pre_load


class LocationSchema(Schema):
    lat = fields.Float(required=True, validate=validate.Range(min=-90, max=90))
    lng = fields.Float(required=True, validate=validate.Range(min=-180, max=180))


class WaterRequestCreateSchema(Schema):
    """Body of POST /api/waters/requests: a name and the point marked on the map."""
    name = fields.Str(required=True, validate=validate.Length(min=1, max=120))
    location = fields.Nested(LocationSchema, required=True)

    @pre_load
    def strip_name(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('name'), str):
            data = dict(data, name=data['name'].strip())
        return data


class WaterRequestSchema(Schema):
    id = fields.Str(required=True)
    name = fields.Str(required=True)
    location = fields.Nested(LocationSchema, allow_none=True)
    requestedAt = fields.Str(allow_none=True)
    requestedBy = fields.Str(allow_none=True)
    requestedByEmail = fields.Str(allow_none=True)
    requestedByName = fields.Str(allow_none=True)
