"""
Management command to render template pages to a PDF file.

Each PAGE_FILE holds the markup of one page, in page order. Parameters are
read from a JSON object file.

Usage:
    python manage.py render_template_pdf cover.html body.html --params data.json -o out.pdf
    python manage.py render_template_pdf body.html --page 1 --engine weasyprint -o out.pdf
    python manage.py render_template_pdf body.html --html -o out.html
"""

import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from documents.printing import (
    AllEnginesFailedError,
    InMemoryTemplateSource,
    PageOrientation,
    TemplateError,
    TemplateRenderService,
)


class Command(BaseCommand):
    help = 'Render template pages with parameters to a PDF (or print-ready HTML) file'

    def add_arguments(self, parser):
        parser.add_argument('pages', nargs='+', help='Files with the markup of each page, in order')
        parser.add_argument('--params', help='JSON file with template parameters')
        parser.add_argument('--style', help='CSS file with the template style sheet')
        parser.add_argument(
            '--orientation',
            choices=['portrait', 'landscape'],
            default='portrait',
            help='Page orientation (default: portrait)',
        )
        parser.add_argument('--page', type=int, help='Render only this 1-based page')
        parser.add_argument('--engine', help='Preferred engine code (default: PDF_ENGINE setting)')
        parser.add_argument(
            '--no-fallback',
            action='store_true',
            help='Use only the engine given with --engine',
        )
        parser.add_argument('--name', help='Template name (default: output file name)')
        parser.add_argument('--html', action='store_true', help='Write print-ready HTML instead of PDF')
        parser.add_argument('-o', '--output', required=True, help='Output file')

    def _read(self, path):
        try:
            return Path(path).read_text(encoding='utf-8')
        except OSError as e:
            raise CommandError(f'Cannot read {path}: {e}')

    def _load_params(self, path):
        if not path:
            return {}
        try:
            params = json.loads(self._read(path))
        except ValueError as e:
            raise CommandError(f'Invalid JSON in {path}: {e}')
        if not isinstance(params, dict):
            raise CommandError(f'{path} must contain a JSON object')
        return params

    def handle(self, *args, **options):
        if options['no_fallback'] and not options['engine']:
            raise CommandError('--no-fallback requires --engine')

        output = Path(options['output'])
        params = self._load_params(options['params'])
        source = InMemoryTemplateSource()
        template = source.register(
            'cli',
            [self._read(path) for path in options['pages']],
            name=options['name'] or output.stem,
            style_sheet=self._read(options['style']) if options['style'] else '',
            orientation=PageOrientation.parse(options['orientation']),
        )

        service = TemplateRenderService(source, preference=options['engine'])
        page_number = options['page']

        self.stdout.write(
            f'Rendering {len(template.pages)} page file(s), '
            f'{service.get_page_count(template.id)} page(s) with content'
        )

        try:
            if options['html']:
                content = service.render_print_html(template.id, params, page_number).encode('utf-8')
                engine = 'html'
            elif options['no_fallback']:
                content = service.render_pdf_with_engine(options['engine'], template.id, params, page_number)
                engine = options['engine']
            else:
                result = service.render_pdf_result(template.id, params, page_number)
                content, engine = result.pdf_bytes, result.engine
        except TemplateError as e:
            raise CommandError(str(e))
        except AllEnginesFailedError as e:
            raise CommandError(str(e))
        except KeyError as e:
            raise CommandError(f'Unknown engine: {e}')

        try:
            output.write_bytes(content)
        except OSError as e:
            raise CommandError(f'Cannot write {output}: {e}')

        self.stdout.write(self.style.SUCCESS(f'Wrote {output} ({len(content)} bytes, {engine})'))
