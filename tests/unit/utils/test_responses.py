import json

from snaplink.utils.responses import response_json, response_302, response_400, response_404, response_503


def test_response_json():
    response = response_json(201, {'shortcode': 'abc123'})

    assert response['statusCode'] == 201
    assert response['headers']['Content-Type'] == 'application/json'
    assert json.loads(response['body']) == {'shortcode': 'abc123'}


def test_response_302_is_never_cached():
    response = response_302(location='https://example.com')
    headers = response['headers']

    assert response['statusCode'] == 302
    assert headers['Location'] == 'https://example.com'
    assert 'no-store' in headers['Cache-Control']
    assert headers['Pragma'] == 'no-cache'
    assert headers['Expires'] == '0'


def test_error_responses():
    assert json.loads(response_400()['body']) == {'message': 'Bad Request'}
    assert json.loads(response_404(message='gone', error_code='X')['body']) == {'message': 'Not Found (gone)', 'errorCode': 'X'}

    response = response_503(error_code='retry')
    assert response['statusCode'] == 503
    assert response['headers']['Retry-After'] == '1'
