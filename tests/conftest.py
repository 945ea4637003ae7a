#  vim:ts=4:sts=4:sw=4:et
#
#  Author: Hari Sekhon
#  Date: 2026-10-16 10:12:41 +0100 (Fri, 16 Oct 2026)
#
#  https://github.com/harisekhon/nagios-plugins
#
#  License: see accompanying Hari Sekhon LICENSE file
#

import json

import pytest
import requests

import check_rabbitmq_queue_totals as plugin


class FakeResponse(object):

    def __init__(self, content, status_code=200, reason='OK'):
        if not isinstance(content, (str, bytes)):
            content = json.dumps(content)
        if isinstance(content, str):
            content = content.encode('utf-8')
        self.content = content
        self.status_code = status_code
        self.reason = reason
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.closed = True
        return False


def overview(ready=0, unacknowledged=0):
    return {'queue_totals': {'messages_ready': ready, 'messages_unacknowledged': unacknowledged}}


class FakeAPI(object):
    """Per host canned responses, records every GET made"""

    def __init__(self):
        self.responses = {}
        self.calls = []

    def get(self, url, auth=None, **kwargs):
        self.calls.append((url, auth))
        host = url.split('://', 1)[1].split(':', 1)[0]
        response = self.responses[host]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def hosts(self):
        return [url.split('://', 1)[1].split(':', 1)[0] for url, _ in self.calls]


@pytest.fixture
def fake_api(monkeypatch):
    api = FakeAPI()
    monkeypatch.setattr(requests, 'get', api.get)
    return api


@pytest.fixture
def config():
    return plugin.Config(hosts=('rabbit1',),
                         port='15672',
                         user='guest',
                         password='guest',
                         ssl=False,
                         warning='10000,10000',
                         critical='50000,50000')
