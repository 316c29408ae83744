"""
Tests for engine ordering and the engine registry.
"""

from unittest.mock import Mock

from django.test import SimpleTestCase

from documents.printing.engines.reportlab_engine import ReportLabEngine
from documents.printing.interfaces import IPdfEngine
from documents.printing.selector import (
    AUTO,
    DEFAULT_ORDER,
    EngineRegistry,
    ordered_engines,
    parse_preference,
)


def names(chain):
    return [descriptor.name for descriptor in chain]


def fake_engine(name, available=True):
    engine = Mock(spec=IPdfEngine)
    engine.name = name
    engine.description = f"{name} engine"
    engine.is_available.return_value = available
    engine.probe.return_value = available
    return engine


class OrderedEnginesTestCase(SimpleTestCase):
    """Test cases for ordered_engines"""

    ALL = {name: True for name in DEFAULT_ORDER}

    def test_auto_uses_default_order(self):
        self.assertEqual(names(ordered_engines(AUTO, self.ALL)), list(DEFAULT_ORDER))

    def test_preference_goes_first(self):
        self.assertEqual(
            names(ordered_engines('weasyprint', self.ALL)),
            ['weasyprint', 'gotenberg', 'playwright', 'reportlab'],
        )

    def test_unavailable_engines_dropped(self):
        availability = {'gotenberg': False, 'playwright': True, 'weasyprint': False, 'reportlab': True}
        self.assertEqual(names(ordered_engines(AUTO, availability)), ['playwright', 'reportlab'])

    def test_unavailable_preference_dropped(self):
        availability = {'gotenberg': False, 'playwright': True}
        self.assertEqual(names(ordered_engines('gotenberg', availability)), ['playwright', 'reportlab'])

    def test_fallback_always_present(self):
        self.assertEqual(names(ordered_engines(AUTO, {})), ['reportlab'])
        self.assertEqual(names(ordered_engines(AUTO, {'reportlab': False})), ['reportlab'])

    def test_fallback_preferred_is_not_repeated(self):
        chain = names(ordered_engines('reportlab', self.ALL))
        self.assertEqual(chain, ['reportlab', 'gotenberg', 'playwright', 'weasyprint'])
        self.assertEqual(chain.count('reportlab'), 1)

    def test_descriptors(self):
        chain = ordered_engines(AUTO, self.ALL)
        self.assertEqual([d.priority for d in chain], [1, 2, 3, 4])
        self.assertTrue(all(d.available for d in chain))
        self.assertTrue(all(d.description for d in chain))

    def test_parse_preference(self):
        self.assertEqual(parse_preference(None), AUTO)
        self.assertEqual(parse_preference(' Playwright '), 'playwright')
        with self.assertLogs('documents.printing.selector', level='WARNING'):
            self.assertEqual(parse_preference('ironpdf'), AUTO)


class EngineRegistryTestCase(SimpleTestCase):
    """Test cases for EngineRegistry"""

    def test_missing_engines_are_unavailable(self):
        registry = EngineRegistry({'gotenberg': None})
        availability = registry.availability()
        self.assertFalse(availability['gotenberg'])
        self.assertFalse(availability['playwright'])
        self.assertTrue(availability['reportlab'])

    def test_fallback_created_automatically(self):
        registry = EngineRegistry()
        self.assertIsInstance(registry.get('reportlab'), ReportLabEngine)

    def test_unknown_engine(self):
        with self.assertRaises(ValueError):
            EngineRegistry({'ironpdf': fake_engine('ironpdf')})
        with self.assertRaises(KeyError):
            EngineRegistry().get('ironpdf')

    def test_snapshot_is_read_only(self):
        registry = EngineRegistry()
        with self.assertRaises(TypeError):
            registry.availability()['gotenberg'] = True

    def test_probe_swaps_snapshot(self):
        engine = fake_engine('playwright', available=False)
        registry = EngineRegistry({'playwright': engine})
        before = registry.availability()
        self.assertFalse(before['playwright'])

        engine.probe.return_value = True
        after = registry.probe()

        self.assertTrue(after['playwright'])
        self.assertIs(registry.availability(), after)
        self.assertFalse(before['playwright'])
        self.assertEqual(names(registry.ordered(AUTO)), ['playwright', 'reportlab'])

    def test_probe_failure_marks_unavailable(self):
        engine = fake_engine('gotenberg')
        engine.probe.side_effect = RuntimeError("no route")
        registry = EngineRegistry({'gotenberg': engine})
        self.assertFalse(registry.probe()['gotenberg'])

    def test_status(self):
        registry = EngineRegistry({'weasyprint': fake_engine('weasyprint')})
        status = registry.status()
        self.assertEqual(list(status), list(DEFAULT_ORDER))
        self.assertEqual(
            status['weasyprint'],
            {'available': True, 'description': 'weasyprint engine', 'priority': 3},
        )
        self.assertFalse(status['gotenberg']['available'])
        self.assertTrue(status['reportlab']['available'])

    def test_close_closes_engines(self):
        engine = fake_engine('playwright')
        registry = EngineRegistry({'playwright': engine})
        registry.close()
        engine.close.assert_called_once_with()
