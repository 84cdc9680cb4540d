"""
WebPoint - Model and Form Tests
"""
from datetime import datetime

import pytest

from webpoint.models.db_models import DBAdminUser, DBBlogArticle, DBPortfolioProject, safe_json_loads
from webpoint.models.forms import (
    ContactRequestForm, ArticleForm, ProjectForm, ValidationError, format_ru_date, parse_status
)


VALID_CONTACT = {
    'name': 'Мария',
    'email': 'maria@example.com',
    'phone': '069123456',
    'projectType': 'landing',
    'message': 'Нужен сайт для салона красоты'
}


class TestAdminUserModel:

    def test_password_is_hashed_and_salted(self):
        first = DBAdminUser('admin', 'secret-pass')
        second = DBAdminUser('other', 'secret-pass')

        assert first.password_hash != 'secret-pass'
        assert first.password_hash != second.password_hash

    def test_password_verification(self):
        user = DBAdminUser('Admin ', 'secret-pass')

        assert user.username == 'admin'
        assert user.verify_password('secret-pass') is True
        assert user.verify_password('Secret-pass') is False
        assert user.verify_password('') is False

    def test_to_dict_hides_hash(self):
        assert 'password_hash' not in DBAdminUser('admin', 'x').to_dict()


class TestContentModels:

    def test_article_category_label_from_key(self):
        article = DBBlogArticle('Заголовок', category_key='design')
        assert article.category == 'Дизайн'

    def test_article_translations_round_trip_as_json(self):
        article = DBBlogArticle('T', translations={'ro': {'title': 'Titlu'}})

        assert article.get_translations() == {'ro': {'title': 'Titlu'}}
        assert article.to_dict()['translations'] == {'ro': {'title': 'Titlu'}}
        assert DBBlogArticle('T').to_dict()['translations'] is None

    def test_project_lists(self):
        project = DBPortfolioProject('P', images=['a.jpg', 'b.jpg'], technologies=[])

        data = project.to_dict()
        assert data['images'] == ['a.jpg', 'b.jpg']
        assert data['technologies'] is None

    def test_safe_json_loads(self):
        assert safe_json_loads('{"a": 1}') == {'a': 1}
        assert safe_json_loads('{broken', {}) == {}
        assert safe_json_loads(None) == []


class TestContactRequestForm:

    def test_valid(self):
        form = ContactRequestForm.from_dict(dict(VALID_CONTACT, email='Maria@Example.COM'))

        assert form.project_type == 'landing'
        assert form.email == 'maria@example.com'

    @pytest.mark.parametrize('field,value', [
        ('name', 'М'),
        ('name', 'М' * 101),
        ('email', 'maria-at-example'),
        ('phone', '12345'),
        ('projectType', 'crypto'),
        ('message', 'Коротко'),
        ('message', 'x' * 1001),
    ])
    def test_each_rule(self, field, value):
        with pytest.raises(ValidationError) as exc:
            ContactRequestForm.from_dict(dict(VALID_CONTACT, **{field: value}))

        expected = 'project_type' if field == 'projectType' else field
        assert list(exc.value.fields) == [expected]

    def test_boundaries_accepted(self):
        form = ContactRequestForm.from_dict(dict(VALID_CONTACT, name='Ян', phone='123456', message='x' * 10))
        assert form.name == 'Ян'

    def test_error_payload_shape(self):
        with pytest.raises(ValidationError) as exc:
            ContactRequestForm.from_dict({})

        payload = exc.value.to_dict()
        assert payload['error'] == 'Validation failed'
        assert set(payload['fields']) == {'name', 'email', 'phone', 'project_type', 'message'}


class TestAdminForms:

    def test_article_defaults(self):
        form = ArticleForm.from_dict({'title': 'T', 'excerpt': 'E', 'content': 'C'}, has_image_file=True)

        assert form.category_key == 'tips'
        assert form.category == 'Советы'
        assert form.read_time == 5
        assert form.date == format_ru_date()
        assert set(form.translatable_fields()) == {'title', 'excerpt', 'content', 'category'}

    def test_article_read_time_must_be_positive(self):
        with pytest.raises(ValidationError) as exc:
            ArticleForm.from_dict({'title': 'T', 'excerpt': 'E', 'content': 'C', 'image': 'x.jpg', 'readTime': '0'})
        assert 'readTime' in exc.value.fields

    def test_project_parses_lists_and_checks_website(self):
        base = {'title': 'T', 'category': 'C', 'problem': 'P', 'solution': 'S', 'result': 'R', 'image': 'i.jpg'}

        form = ProjectForm.from_dict(dict(base, technologies='React, Flask\nPostgreSQL', type='tg-shop'))
        assert form.technologies == ['React', 'Flask', 'PostgreSQL']
        assert form.type == 'tg-shop'

        with pytest.raises(ValidationError) as exc:
            ProjectForm.from_dict(dict(base, website='ftp://example.com', type='watch'))
        assert set(exc.value.fields) == {'website', 'type'}

    def test_ru_date(self):
        assert format_ru_date(datetime(2024, 1, 5)) == '5 января 2024'
        assert format_ru_date(datetime(2023, 12, 31)) == '31 декабря 2023'

    def test_parse_status(self):
        assert parse_status({'status': 'read'}) == 'read'
        with pytest.raises(ValidationError):
            parse_status({'status': 'spam'})
