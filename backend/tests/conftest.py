from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from siteforge import create_app
from siteforge.extensions import db
from siteforge.models.tenant import Tenant
from siteforge.models.template import Template, TemplatePage
from siteforge.models.skill import Skill

from fakes import FakeBackend

BASE_URL = "http://testserver/api/v1"

ABOUT_SECTIONS = [
    {
        "name": "hero",
        "content": (
            '<section class="sf-hero-section">\n'
            '  <h1 class="sf-hero-section-title">Welcome</h1>\n'
            '  <p class="sf-hero-section-text">We fix teeth.</p>\n'
            "</section>"
        ),
    },
    {
        "name": "contact",
        "content": '<div class="sf-contact-section"><a class="sf-contact-section-link" href="/c">Call</a></div>',
    },
]


class FlaskTestAdapter(BaseAdapter):
    """Sends `requests` traffic to a Flask test client instead of the network."""

    def __init__(self, test_client):
        super().__init__()
        self.test_client = test_client

    def send(self, request, **kwargs):
        parts = urlsplit(request.url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        headers = {k: v for k, v in request.headers.items() if k.lower() != "content-length"}

        resp = self.test_client.open(
            path,
            method=request.method,
            data=request.body,
            headers=headers,
        )

        response = requests.Response()
        response.status_code = resp.status_code
        response.reason = resp.status.split(" ", 1)[-1]
        response.headers = CaseInsensitiveDict(dict(resp.headers))
        response._content = resp.get_data()
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tenant(app):
    tenant = Tenant(
        name="Acme Dental Group",
        slug="acme",
        enable_website_builder=True,
        enable_ai_assistant=True,
        enable_skills=True,
    )
    db.session.add(tenant)
    db.session.commit()
    return tenant


@pytest.fixture
def headers(tenant):
    return {"X-Tenant-ID": tenant.id, "X-Actor-ID": "user-1"}


@pytest.fixture
def template(app):
    template = Template(name="Dental")
    template.pages.append(TemplatePage(path="/", name="Home", sections=ABOUT_SECTIONS))
    template.pages.append(TemplatePage(path="/about", name="About", sections=ABOUT_SECTIONS))
    db.session.add(template)
    db.session.commit()
    return template


@pytest.fixture
def empty_template(app):
    template = Template(name="Blank")
    db.session.add(template)
    db.session.commit()
    return template


@pytest.fixture
def skill(tenant):
    skill = Skill(tenant_id=tenant.id, name="Review replies", definition={"tone": "warm"})
    db.session.add(skill)
    db.session.commit()
    return skill


@pytest.fixture
def http_session(client):
    session = requests.Session()
    session.mount("http://testserver", FlaskTestAdapter(client))
    return session


@pytest.fixture
def fake_backend():
    return FakeBackend()
