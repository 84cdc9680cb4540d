"""
WebPoint - Test Doubles
Fake upstream responses for the translation API and the image host
"""
import re
from unittest.mock import MagicMock


LANGUAGE_PREFIX = {'Romanian': 'ro', 'English': 'en'}

PROMPT_RE = re.compile(
    r'Translate the following Russian text to (\w+)\..*?Text to translate:\n(.*)\n\nYour translation:',
    re.S
)


def make_response(status_code=200, json_data=None, text=''):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = 'OK' if response.ok else 'Error'
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


def completion(content):
    return {'choices': [{'message': {'role': 'assistant', 'content': content}}]}


class FakeUpstream:
    """
    Stand-in for requests.post covering the translation API and the image
    host. Translations come back as "[ro] <text>" / "[en] <text>".
    """

    def __init__(self, fail_locale=None, fail_upload=False):
        self.fail_locale = fail_locale
        self.fail_upload = fail_upload
        self.translation_calls = []
        self.upload_calls = []

    def __call__(self, url, *args, **kwargs):
        if 'cloudinary' in url:
            self.upload_calls.append(url)
            if self.fail_upload:
                return make_response(400, {'error': {'message': 'Upload preset not found'}})
            return make_response(200, {
                'secure_url': 'https://res.cloudinary.com/test-cloud/image/upload/v1/webpoint/photo.jpg',
                'public_id': 'webpoint/photo'
            })

        prompt = kwargs['json']['messages'][1]['content']
        language, text = PROMPT_RE.search(prompt).groups()
        locale = LANGUAGE_PREFIX[language]
        self.translation_calls.append((locale, kwargs['json']['max_tokens']))
        if locale == self.fail_locale:
            return make_response(500, text='upstream exploded')
        return make_response(200, completion(f'[{locale}] {text}'))
