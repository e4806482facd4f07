# perchfinder/api/lures/test_routes.py
from perchfinder.api.lures.services import has_complete_lure_info
from perchfinder.data.lures import DEFAULT_LURES
from perchfinder.models.catch import LureOption


def test_empty_collection_falls_back_to_builtin_catalog(client):
    response = client.get('/api/lures')
    assert response.status_code == 200
    body = response.get_json()
    assert body['total_count'] == len(DEFAULT_LURES)
    assert body['lures'][0]['brand'] == 'Keitech'


def test_incomplete_and_varying_entries_are_filtered(client, fake_db):
    lures = fake_db.collection('Lures').docs
    lures['ok'] = {'brand': 'Westin', 'name': 'ShadTeez', 'size': '9 cm', 'color': 'Baitfish', 'category': 'Shad'}
    lures['legacy'] = {'brand': 'Abu', 'name': 'Toby', 'size': '12 g', 'color': 'Silver', 'type': 'Skeddrag'}
    lures['no-color'] = {'brand': 'Rapala', 'name': 'X-Rap', 'size': '10 cm', 'color': ' ', 'category': 'Wobbler'}
    lures['varies'] = {'brand': 'Savage Gear', 'name': 'Cannibal', 'size': 'Varierar', 'color': 'Perch',
                       'category': 'Shad'}

    body = client.get('/api/lures').get_json()

    assert sorted(lure['id'] for lure in body['lures']) == ['legacy', 'ok']


def test_builtin_catalog_is_complete():
    assert all(has_complete_lure_info(lure) for lure in DEFAULT_LURES)


def test_missing_category_counts_as_incomplete():
    lure = LureOption(id='x', brand='Abu', name='Toby', size='12 g', color='Silver')
    assert not has_complete_lure_info(lure)
