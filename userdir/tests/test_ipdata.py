"""Tests for :mod:`userdir.services.ipdata`."""

from unittest import TestCase, mock

import requests

from ..services import ipdata
from ..services.ipdata import OriginClassifier


def _analysis(asn='AS64500', asn_type='isp', **threat):
    return {'ip': '8.8.8.8',
            'asn': {'asn': asn, 'type': asn_type},
            'threat': dict({signal: False
                            for signal in ipdata.THREAT_SIGNALS}, **threat)}


class TestIsProxy(TestCase):
    """Tests for :func:`ipdata.is_proxy`."""

    def test_clean(self):
        self.assertFalse(ipdata.is_proxy(_analysis()))

    def test_threat_signals(self):
        for signal in ipdata.THREAT_SIGNALS:
            self.assertTrue(ipdata.is_proxy(_analysis(**{signal: True})),
                            signal)

    def test_hosting(self):
        """Hosting providers are treated as proxies."""
        self.assertTrue(ipdata.is_proxy(_analysis(asn_type='hosting')))

    def test_exempt(self):
        """Exempt networks are never proxies."""
        analysis = _analysis(asn_type='hosting', is_tor=True)
        self.assertFalse(ipdata.is_proxy(analysis, exempt_asns=['64500']))

    def test_missing_data(self):
        self.assertFalse(ipdata.is_proxy(None))
        self.assertFalse(ipdata.is_proxy({}))
        self.assertFalse(ipdata.is_proxy({'asn': {'asn': 'AS1'}}))


class TestOriginClassifier(TestCase):
    """Tests for :class:`.OriginClassifier`."""

    def setUp(self):
        self.session = mock.MagicMock(spec=requests.Session)
        self.classifier = OriginClassifier('key-123',
                                           endpoint='https://ip.test/',
                                           session=self.session)

    def test_lookup(self):
        response = self.session.get.return_value
        response.json.return_value = _analysis(is_proxy=True)
        self.assertTrue(self.classifier.is_proxy('8.8.8.8'))
        self.session.get.assert_called_once_with(
            'https://ip.test/8.8.8.8', params={'api-key': 'key-123'},
            timeout=5.0
        )

    def test_private_address_not_looked_up(self):
        """Addresses that are not routable are never sent out."""
        for ip in ('127.0.0.1', '10.1.2.3', '::1'):
            self.assertIsNone(self.classifier.lookup(ip))
        self.assertFalse(self.session.get.called)

    def test_not_an_address(self):
        with self.assertLogs('userdir.services.ipdata', level='WARNING'):
            self.assertIsNone(self.classifier.lookup('not-an-ip'))

    def test_service_down(self):
        """If the service fails, the origin is not classified as a proxy."""
        self.session.get.side_effect = requests.ConnectionError('down')
        with self.assertLogs('userdir.services.ipdata', level='WARNING'):
            self.assertFalse(self.classifier.is_proxy('8.8.8.8'))

    def test_no_api_key(self):
        classifier = OriginClassifier(None, session=self.session)
        self.assertIsNone(classifier.lookup('8.8.8.8'))
        self.assertFalse(self.session.get.called)

    def test_from_config(self):
        classifier = OriginClassifier.from_config({
            'IPDATA_API_KEY': 'abc',
            'IPDATA_ENDPOINT': 'https://ip.test',
            'PROXY_EXEMPT_ASNS': '64500, 64501',
        })
        self.assertEqual(classifier.api_key, 'abc')
        self.assertEqual(classifier.exempt_asns, ('64500', '64501'))
