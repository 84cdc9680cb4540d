"""
WebPoint - API Tests
"""
import io
import runpy
from pathlib import Path

from webpoint.database import db
from webpoint.models.db_models import DBBlogArticle, DBPortfolioProject, DBContactRequest


ARTICLE = {
    'title': 'Сколько стоит лендинг',
    'excerpt': 'Цены на 2024 год',
    'content': 'Подробный разбор стоимости',
    'categoryKey': 'prices',
    'readTime': 6,
    'image': 'https://cdn.example.com/price.jpg'
}


class TestAuth:

    def test_login_returns_token(self, client, admin):
        response = client.post('/api/auth/login', json={'username': 'Admin', 'password': 'correct-horse-battery'})

        assert response.status_code == 200
        body = response.get_json()
        assert body['token']
        assert body['user']['username'] == 'admin'
        assert 'password_hash' not in body['user']

    def test_wrong_password_and_unknown_user_look_the_same(self, client, admin):
        wrong = client.post('/api/auth/login', json={'username': 'admin', 'password': 'nope'})
        unknown = client.post('/api/auth/login', json={'username': 'ghost', 'password': 'nope'})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json() == unknown.get_json()

    def test_admin_routes_require_token(self, client):
        assert client.get('/api/admin/blog').status_code == 401
        assert client.get('/api/admin/blog', headers={'Authorization': 'Bearer garbage'}).status_code == 401

    def test_me(self, client, auth_headers):
        response = client.get('/api/auth/me', headers=auth_headers)
        assert response.get_json()['username'] == 'admin'


class TestAdminBlog:

    def test_create_translates_and_persists(self, client, auth_headers, upstream):
        response = client.post('/api/admin/blog', json=ARTICLE, headers=auth_headers)

        assert response.status_code == 201
        body = response.get_json()
        assert body['category'] == 'Цены'
        assert body['translations']['ro']['title'] == '[ro] Сколько стоит лендинг'
        assert body['translations']['en']['category'] == '[en] Цены'
        assert body['date']
        assert len(upstream.translation_calls) == 8

    def test_create_with_uploaded_image(self, client, auth_headers, upstream):
        data = {k: str(v) for k, v in ARTICLE.items() if k != 'image'}
        data['image'] = (io.BytesIO(b'jpeg-bytes'), 'cover.jpg')

        response = client.post('/api/admin/blog', data=data, headers=auth_headers,
                               content_type='multipart/form-data')

        assert response.status_code == 201
        assert response.get_json()['image'].startswith('https://res.cloudinary.com/test-cloud/')
        assert len(upstream.upload_calls) == 1

    def test_validation_errors(self, client, auth_headers, upstream):
        response = client.post('/api/admin/blog', json={'title': '', 'categoryKey': 'news'},
                               headers=auth_headers)

        assert response.status_code == 400
        fields = response.get_json()['fields']
        assert {'title', 'excerpt', 'content', 'categoryKey', 'image'} <= set(fields)
        assert upstream.translation_calls == []

    def test_update_retranslates(self, client, auth_headers, upstream):
        created = client.post('/api/admin/blog', json=ARTICLE, headers=auth_headers).get_json()

        response = client.put(f"/api/admin/blog/{created['id']}",
                               json=dict(ARTICLE, title='Новая цена'), headers=auth_headers)

        assert response.status_code == 200
        body = response.get_json()
        assert body['translations']['en']['title'] == '[en] Новая цена'
        assert body['updated_at'] is not None
        assert len(upstream.translation_calls) == 16

    def test_delete(self, client, auth_headers, upstream):
        created = client.post('/api/admin/blog', json=ARTICLE, headers=auth_headers).get_json()

        assert client.delete(f"/api/admin/blog/{created['id']}", headers=auth_headers).status_code == 200
        assert client.delete(f"/api/admin/blog/{created['id']}", headers=auth_headers).status_code == 404
        assert DBBlogArticle.query.count() == 0


class TestPublicContent:

    def _seed_article(self):
        article = DBBlogArticle(
            'Советы по SEO', excerpt='Кратко', content='Текст', category_key='seo',
            translations={
                'ro': {'title': 'Sfaturi SEO', 'excerpt': 'Pe scurt', 'content': 'Text', 'category': 'SEO'},
                'en': {'title': 'SEO tips', 'excerpt': '', 'content': 'Body', 'category': 'SEO'},
            }
        )
        db.session.add(article)
        db.session.commit()
        return article

    def test_article_list_is_projected(self, client):
        self._seed_article()

        body = client.get('/api/blog?lang=en').get_json()

        assert body['locale'] == 'en'
        assert body['total'] == 1
        item = body['items'][0]
        assert item['title'] == 'SEO tips'
        assert item['excerpt'] == 'Кратко'
        assert 'translations' not in item

    def test_article_detail_uses_accept_language(self, client):
        article = self._seed_article()

        body = client.get(f'/api/blog/{article.id}', headers={'Accept-Language': 'ro-RO,ro;q=0.9'}).get_json()

        assert body['title'] == 'Sfaturi SEO'

    def test_article_category_filter_and_pagination(self, client):
        for i in range(5):
            db.session.add(DBBlogArticle(f'Статья {i}', category_key='tips' if i % 2 else 'seo'))
        db.session.commit()

        body = client.get('/api/blog?category=seo&per_page=2&page=9').get_json()

        assert body['total'] == 3
        assert body['total_pages'] == 2
        assert body['page'] == 2
        assert len(body['items']) == 1

    def test_unknown_article(self, client):
        assert client.get('/api/blog/999').status_code == 404

    def test_portfolio_title_stays_russian(self, client):
        project = DBPortfolioProject(
            'Кофейня', type='landing', category='Лендинг',
            translations={'en': {'title': 'Coffee', 'category': 'Landing', 'problem': 'P',
                                 'solution': 'S', 'result': 'R'}}
        )
        db.session.add(project)
        db.session.commit()

        body = client.get('/api/portfolio?lang=en&type=landing').get_json()

        assert body['items'][0]['title'] == 'Кофейня'
        assert body['items'][0]['category'] == 'Landing'
        assert client.get('/api/portfolio?type=shop').get_json()['total'] == 0

    def test_stored_public_ids_served_as_urls(self, client):
        db.session.add(DBBlogArticle('Обложка', image='webpoint/cover'))
        db.session.add(DBPortfolioProject(
            'Магазин', image='webpoint/shop',
            images=['https://cdn.example.com/a.jpg', 'webpoint/shop-2']
        ))
        db.session.commit()
        prefix = 'https://res.cloudinary.com/test-cloud/image/upload/f_auto,q_auto/'

        article = client.get('/api/blog').get_json()['items'][0]
        project = client.get('/api/portfolio').get_json()['items'][0]

        assert article['image'] == prefix + 'webpoint/cover'
        assert project['image'] == prefix + 'webpoint/shop'
        assert project['images'] == ['https://cdn.example.com/a.jpg', prefix + 'webpoint/shop-2']

    def test_contact_info_missing(self, client):
        assert client.get('/api/contact').status_code == 404


class TestAdminContactRequests:

    def _seed(self, count):
        for i in range(count):
            db.session.add(DBContactRequest(
                name=f'Клиент {i}', email=f'c{i}@example.com', phone='+37300000000',
                project_type='seo', message='Сообщение клиента', status='new' if i % 2 else 'read'
            ))
        db.session.commit()

    def test_list_with_filter_and_pages(self, client, auth_headers):
        self._seed(5)

        body = client.get('/api/admin/contact-requests?status=new&per_page=1', headers=auth_headers).get_json()

        assert body['total'] == 2
        assert body['total_pages'] == 2
        assert body['items'][0]['status'] == 'new'

    def test_default_page_size_is_ten(self, client, auth_headers):
        self._seed(12)

        body = client.get('/api/admin/contact-requests', headers=auth_headers).get_json()

        assert body['total'] == 12
        assert body['total_pages'] == 2
        assert len(body['items']) == 10

    def test_bad_status_filter(self, client, auth_headers):
        assert client.get('/api/admin/contact-requests?status=spam', headers=auth_headers).status_code == 400

    def test_update_status(self, client, auth_headers):
        self._seed(1)
        request_id = DBContactRequest.query.one().id

        response = client.put(f'/api/admin/contact-requests/{request_id}/status',
                              json={'status': 'archived'}, headers=auth_headers)
        invalid = client.put(f'/api/admin/contact-requests/{request_id}/status',
                             json={'status': 'deleted'}, headers=auth_headers)

        assert response.get_json()['status'] == 'archived'
        assert invalid.status_code == 400

    def test_dashboard_counts(self, client, auth_headers, sendgrid):
        self._seed(3)
        client.post('/api/newsletter/subscribe', json={'email': 'a@example.com'})

        counts = client.get('/api/admin/dashboard', headers=auth_headers).get_json()['counts']

        assert counts['new_requests'] == 1
        assert counts['total_requests'] == 3
        assert counts['subscribers'] == 1
        assert counts['articles'] == 0


class TestAdminPortfolio:

    def test_move_endpoint(self, client, auth_headers):
        a = DBPortfolioProject('A', priority=2)
        b = DBPortfolioProject('B', priority=1)
        db.session.add_all([a, b])
        db.session.commit()

        response = client.post(f'/api/admin/portfolio/{b.id}/move', json={'direction': 'up'},
                               headers=auth_headers)

        assert response.status_code == 200
        assert [p['title'] for p in response.get_json()['projects']] == ['B', 'A']
        assert client.post(f'/api/admin/portfolio/{b.id}/move', json={'direction': 'left'},
                           headers=auth_headers).status_code == 400

    def test_contact_settings(self, client, auth_headers):
        payload = {
            'phone': '+373 69 000 000', 'email': 'hello@webpoint.md', 'address': 'Chișinău',
            'whatsapp_link': 'https://wa.me/1', 'telegram_link': 'https://t.me/webpoint'
        }

        assert client.put('/api/admin/contact', json=payload, headers=auth_headers).status_code == 200
        assert client.get('/api/contact').get_json()['email'] == 'hello@webpoint.md'


class TestAppShell:

    def test_health(self, client):
        body = client.get('/health').get_json()
        assert body['status'] == 'healthy'
        assert body['database'] == 'connected'

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Not found'

    def test_wrong_method_is_json(self, client):
        response = client.delete('/api/blog')
        assert response.status_code == 405
        assert response.get_json()['error'] == 'Method not allowed'

    def test_gunicorn_builds_app_from_factory(self):
        settings = runpy.run_path(str(Path(__file__).resolve().parent.parent / 'gunicorn.conf.py'))

        module, _, target = settings['wsgi_app'].partition(':')
        assert module == 'webpoint'
        assert target == 'create_app()'
