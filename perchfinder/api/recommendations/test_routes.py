# perchfinder/api/recommendations/test_routes.py
"""
Advice endpoint tests

Usage: python -m pytest perchfinder/api/recommendations/test_routes.py -v
"""

import json

from perchfinder.conftest import UNVERIFIED_TOKEN, VALID_TOKEN
from perchfinder.engine.payload import build_water_stats_payload
from perchfinder.models.catch import CatchRecord, LureOption
from perchfinder.models.recommendation import CurrentConditions
from perchfinder.utils.datetime_utils import DateTimeUtils

ORIGIN = 'http://localhost:5173'


def _stats():
    jig = LureOption(id="k1", brand="Keitech", name='Swing Impact 3"', category="Jigg")
    catches = [
        CatchRecord(water_id="brunnsviken", caught_at=DateTimeUtils.parse_wall_clock("2024-06-01T07:00:00Z"),
                    lure=jig, method="Dropshot", temperature_c=9.0, pressure_hpa=1013.0, weather_code=2),
        CatchRecord(water_id="brunnsviken", caught_at=DateTimeUtils.parse_wall_clock("2024-06-02T18:00:00Z"),
                    lure=jig, temperature_c=14.0, pressure_hpa=1005.0, weather_code=61),
    ]
    current = CurrentConditions(observed_at_iso="2024-06-10T07:15", time_of_day="Morgon",
                                weather_summary="Mest klart", weather_code=2,
                                temperature_c=9.5, pressure_hpa=1012.0)
    return build_water_stats_payload(catches, "Brunnsviken", current).to_dict()


def _post(client, body=None, token=VALID_TOKEN, origin=ORIGIN, **kwargs):
    headers = {}
    if token:
        headers['Authorization'] = f'Bearer {token}'
    if origin:
        headers['Origin'] = origin
    data = kwargs.pop('data', None)
    if data is None:
        data = json.dumps({"stats": _stats()} if body is None else body)
    return client.post('/', data=data, headers=headers, content_type='application/json', **kwargs)


def test_successful_request_returns_advice_and_cors_headers(client, verify_id_token, fake_openai):
    response = _post(client)

    assert response.status_code == 200
    assert response.get_json() == {"recommendation": "Fiska med jigg på morgonen."}
    assert response.headers['Access-Control-Allow-Origin'] == ORIGIN
    assert fake_openai.calls[0]['waterName'] == "Brunnsviken"
    assert fake_openai.calls[0]['similarWhenLikeNow']['comparedCatchCount'] == 2


def test_disallowed_origin_is_rejected_before_auth(client, verify_id_token, fake_openai):
    response = _post(client, origin='https://evil.example')
    assert response.status_code == 403
    assert 'Access-Control-Allow-Origin' not in response.headers
    assert fake_openai.calls == []


def test_request_without_origin_is_served_without_cors_headers(client, verify_id_token):
    response = _post(client, origin=None)
    assert response.status_code == 200
    assert 'Access-Control-Allow-Origin' not in response.headers


def test_preflight_returns_204(client):
    response = client.options('/', headers={'Origin': ORIGIN, 'Access-Control-Request-Method': 'POST'})
    assert response.status_code == 204
    assert 'Authorization' in response.headers['Access-Control-Allow-Headers']


def test_get_is_not_allowed(client):
    response = client.get('/', headers={'Origin': ORIGIN})
    assert response.status_code == 405


def test_oversized_body_is_rejected(client, verify_id_token, fake_openai):
    body = {"stats": _stats(), "padding": "x" * 30000}
    response = _post(client, body=body)
    assert response.status_code == 413
    assert fake_openai.calls == []


def test_oversized_chunked_body_is_rejected(client, verify_id_token, fake_openai):
    body = json.dumps({"stats": _stats(), "padding": "x" * 30000})
    response = client.post(
        '/', data=body, content_type='application/json',
        headers={'Authorization': f'Bearer {VALID_TOKEN}', 'Origin': ORIGIN, 'Transfer-Encoding': 'chunked'},
        environ_overrides={'wsgi.input_terminated': True},
    )
    assert response.status_code == 413
    assert response.get_json()['error_code'] == 'PAYLOAD_TOO_LARGE'
    assert fake_openai.calls == []


def test_missing_token_is_unauthenticated(client, verify_id_token):
    response = _post(client, token=None)
    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'UNAUTHENTICATED'


def test_invalid_token_is_unauthenticated(client, verify_id_token):
    response = _post(client, token='forged')
    assert response.status_code == 401


def test_unverified_email_is_rejected(client, verify_id_token, fake_openai):
    response = _post(client, token=UNVERIFIED_TOKEN)
    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'EMAIL_NOT_VERIFIED'
    assert fake_openai.calls == []


def test_invalid_payload_is_rejected_with_details(client, verify_id_token, fake_openai):
    stats = _stats()
    stats['totalCatches'] = "2"
    stats['general']['bestTimeOfDay'] = "Lunch"
    response = _post(client, body={"stats": stats})

    assert response.status_code == 400
    body = response.get_json()
    assert body['error_code'] == 'INVALID_ARGUMENT'
    assert 'totalCatches' in body['details']['stats']
    assert 'bestTimeOfDay' in body['details']['stats']['general']
    assert fake_openai.calls == []


def test_non_json_body_is_rejected(client, verify_id_token):
    response = _post(client, data="not json")
    assert response.status_code == 400


def test_eleventh_request_is_rate_limited(client, verify_id_token, fake_openai):
    for _ in range(10):
        assert _post(client).status_code == 200

    response = _post(client)
    assert response.status_code == 429
    assert int(response.headers['Retry-After']) >= 1
    assert response.get_json()['error_code'] == 'RATE_LIMITED'
    assert len(fake_openai.calls) == 10


def test_invalid_requests_do_not_consume_quota(client, app, verify_id_token):
    for _ in range(12):
        _post(client, body={"stats": {"waterName": ""}})
    assert _post(client).status_code == 200


def test_model_failure_returns_generic_error(client, verify_id_token, fake_openai):
    fake_openai.fail = True
    response = _post(client)
    assert response.status_code == 500
    assert response.get_json() == {"error": "Error generating recommendation", "detail": "model unavailable"}
