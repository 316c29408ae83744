"""
Tests for the fallback orchestrator.
"""

from unittest.mock import Mock, patch

from django.test import SimpleTestCase, override_settings

from documents.printing.dto import PageOrientation, RenderRequest
from documents.printing.exceptions import (
    AllEnginesFailedError,
    EngineRenderError,
    EngineTimeout,
)
from documents.printing.interfaces import IPdfEngine
from documents.printing.orchestrator import FallbackOrchestrator
from documents.printing.selector import EngineRegistry


PDF = b'%PDF-1.4 test'


def fake_engine(name, result=PDF, available=True):
    engine = Mock(spec=IPdfEngine)
    engine.name = name
    engine.description = name
    engine.is_available.return_value = available
    engine.probe.return_value = available
    if isinstance(result, BaseException):
        engine.render.side_effect = result
    else:
        engine.render.return_value = result
    return engine


class FallbackOrchestratorTestCase(SimpleTestCase):
    """Test cases for FallbackOrchestrator"""

    def make(self, preference='auto', timeout=30.0, **engines):
        engines.setdefault('reportlab', fake_engine('reportlab', b'%PDF-fallback'))
        return FallbackOrchestrator(EngineRegistry(engines), preference=preference, timeout=timeout)

    def test_first_engine_wins(self):
        gotenberg = fake_engine('gotenberg')
        playwright = fake_engine('playwright')
        orchestrator = self.make(gotenberg=gotenberg, playwright=playwright)

        outcome = orchestrator.render_outcome("<p>x</p>")

        self.assertEqual(outcome.pdf_bytes, PDF)
        self.assertEqual(outcome.engine, 'gotenberg')
        self.assertEqual(len(outcome.attempts), 1)
        playwright.render.assert_not_called()

    def test_unavailable_engine_never_invoked(self):
        gotenberg = fake_engine('gotenberg', available=False)
        playwright = fake_engine('playwright', EngineRenderError("crashed", engine='playwright'))
        reportlab = fake_engine('reportlab', b'%PDF-fallback')
        orchestrator = self.make(gotenberg=gotenberg, playwright=playwright, reportlab=reportlab)

        with self.assertLogs('documents.printing.orchestrator', level='WARNING') as logs:
            pdf = orchestrator.render("<p>x</p>")

        self.assertEqual(pdf, b'%PDF-fallback')
        gotenberg.render.assert_not_called()
        playwright.render.assert_called_once()
        reportlab.render.assert_called_once()
        self.assertTrue(any('playwright' in line and 'crashed' in line for line in logs.output))

    def test_empty_result_is_failure(self):
        weasyprint = fake_engine('weasyprint', b'')
        outcome = self.make(weasyprint=weasyprint).render_outcome("<p>x</p>")
        self.assertEqual(outcome.engine, 'reportlab')
        self.assertIsInstance(outcome.attempts[0].error, EngineRenderError)

    def test_all_engines_failed(self):
        error = RuntimeError("disk full")
        orchestrator = self.make(
            weasyprint=fake_engine('weasyprint', ValueError("bad css")),
            reportlab=fake_engine('reportlab', error),
        )

        with self.assertRaises(AllEnginesFailedError) as cm:
            orchestrator.render("<p>x</p>")

        exc = cm.exception
        self.assertEqual(exc.engine_names, ['weasyprint', 'reportlab'])
        self.assertIs(exc.last_error, error)
        self.assertIs(exc.__cause__, error)
        self.assertIn("2", str(exc))
        self.assertIn("disk full", str(exc))

    def test_each_engine_tried_once(self):
        playwright = fake_engine('playwright', RuntimeError("x"))
        reportlab = fake_engine('reportlab', RuntimeError("y"))
        with self.assertRaises(AllEnginesFailedError):
            self.make('playwright', playwright=playwright, reportlab=reportlab).render("<p>x</p>")
        self.assertEqual(playwright.render.call_count, 1)
        self.assertEqual(reportlab.render.call_count, 1)

    def test_preference_respected(self):
        gotenberg = fake_engine('gotenberg')
        weasyprint = fake_engine('weasyprint', b'%PDF-weasy')
        outcome = self.make('weasyprint', gotenberg=gotenberg, weasyprint=weasyprint).render_outcome("x")
        self.assertEqual(outcome.engine, 'weasyprint')
        gotenberg.render.assert_not_called()

    def test_request_passed_to_engine(self):
        gotenberg = fake_engine('gotenberg')
        self.make(gotenberg=gotenberg).render(
            "<p>x</p>", page_number=2, orientation='landscape', template_id=7
        )
        request = gotenberg.render.call_args[0][0]
        self.assertIsInstance(request, RenderRequest)
        self.assertEqual(request.html, "<p>x</p>")
        self.assertEqual(request.page_number, 2)
        self.assertEqual(request.orientation, PageOrientation.LANDSCAPE)
        self.assertEqual(request.template_id, 7)
        self.assertEqual(request.deadline.timeout, 30.0)

    def test_expired_deadline_skips_to_fallback(self):
        gotenberg = fake_engine('gotenberg')
        reportlab = fake_engine('reportlab', b'%PDF-fallback')
        orchestrator = self.make(gotenberg=gotenberg, reportlab=reportlab)

        with patch('documents.printing.dto.Deadline.expired', new=True):
            outcome = orchestrator.render_outcome("<p>x</p>")

        gotenberg.render.assert_not_called()
        self.assertEqual(outcome.engine, 'reportlab')
        self.assertIsInstance(outcome.attempts[0].error, EngineTimeout)

    @override_settings(PDF_ENGINE='playwright', PDF_RENDER_TIMEOUT=12.0)
    def test_defaults_from_settings(self):
        orchestrator = FallbackOrchestrator(EngineRegistry())
        self.assertEqual(orchestrator.preference, 'playwright')
        self.assertEqual(orchestrator.timeout, 12.0)


class RenderWithEngineTestCase(SimpleTestCase):
    """Test cases for FallbackOrchestrator.render_with_engine"""

    def test_uses_only_named_engine(self):
        gotenberg = fake_engine('gotenberg')
        weasyprint = fake_engine('weasyprint', b'%PDF-weasy')
        orchestrator = FallbackOrchestrator(
            EngineRegistry({'gotenberg': gotenberg, 'weasyprint': weasyprint}), timeout=10.0
        )
        self.assertEqual(orchestrator.render_with_engine('weasyprint', "x"), b'%PDF-weasy')
        gotenberg.render.assert_not_called()

    def test_failure_has_one_attempt(self):
        error = EngineRenderError("boom", engine='weasyprint')
        reportlab = fake_engine('reportlab')
        orchestrator = FallbackOrchestrator(
            EngineRegistry({'weasyprint': fake_engine('weasyprint', error), 'reportlab': reportlab}),
            timeout=10.0,
        )
        with self.assertRaises(AllEnginesFailedError) as cm:
            orchestrator.render_with_engine('weasyprint', "x")
        self.assertEqual(cm.exception.engine_names, ['weasyprint'])
        self.assertIs(cm.exception.__cause__, error)
        reportlab.render.assert_not_called()

    def test_missing_engine(self):
        orchestrator = FallbackOrchestrator(EngineRegistry(), timeout=10.0)
        with self.assertRaises(AllEnginesFailedError):
            orchestrator.render_with_engine('gotenberg', "x")

    def test_unknown_engine(self):
        with self.assertRaises(KeyError):
            FallbackOrchestrator(EngineRegistry(), timeout=10.0).render_with_engine('ironpdf', "x")
