"""
Tests for page composition.
"""

from django.test import SimpleTestCase

from documents.printing.compositor import (
    EMPTY_DOCUMENT,
    EMPTY_PAGE,
    PAGE_BREAK_DIRECTIVE,
    PageCompositor,
)
from documents.printing.dto import TemplatePage
from documents.printing.exceptions import InvalidPageNumber, TemplateRenderError


def make_pages(*contents):
    return [
        TemplatePage(name=f"Page {order}", content=content, order=order)
        for order, content in enumerate(contents, start=1)
    ]


class ComposeTestCase(SimpleTestCase):
    """Test cases for PageCompositor.compose"""

    def setUp(self):
        self.compositor = PageCompositor(autoescape=False)

    def test_single_page_has_no_container(self):
        html = self.compositor.compose(make_pages("<p>${name}</p>", ""), {'name': 'Ann'})
        self.assertEqual(html, "<p>Ann</p>")
        self.assertEqual(html.count("Ann"), 1)
        self.assertNotIn(PAGE_BREAK_DIRECTIVE, html)

    def test_page_breaks_between_pages(self):
        html = self.compositor.compose(make_pages("<p>one</p>", "<p>two</p>", "<p>three</p>"))
        self.assertEqual(html.count(PAGE_BREAK_DIRECTIVE), 2)
        self.assertEqual(html.count('class="template-page'), 3)
        self.assertIn('data-page-number="1"', html)
        self.assertIn('data-page-number="3"', html)
        first, second = html.index("one"), html.index(PAGE_BREAK_DIRECTIVE)
        self.assertLess(first, second)

    def test_pages_sorted_by_order(self):
        pages = [
            TemplatePage(name="B", content="<p>second</p>", order=2),
            TemplatePage(name="A", content="<p>first</p>", order=1),
        ]
        html = self.compositor.compose(pages)
        self.assertLess(html.index("first"), html.index("second"))

    def test_empty_pages_are_skipped(self):
        html = self.compositor.compose(make_pages("<p>one</p>", "<p>&nbsp;</p>", "<p>two</p>"))
        self.assertEqual(html.count(PAGE_BREAK_DIRECTIVE), 1)
        self.assertIn('data-page-number="2"', html)
        self.assertNotIn('data-page-number="3"', html)

    def test_no_content_gives_empty_document(self):
        self.assertEqual(self.compositor.compose([]), EMPTY_DOCUMENT)
        self.assertEqual(self.compositor.compose(make_pages("", "  ")), EMPTY_DOCUMENT)

    def test_missing_parameters_render_empty(self):
        html = self.compositor.compose(make_pages("<p>[${customer.name}]</p>"))
        self.assertEqual(html, "<p>[]</p>")

    def test_list_rendering(self):
        html = self.compositor.compose(
            make_pages("<ul><#list items as item><li>${item.label}</li></#list></ul>"),
            {'items': [{'label': 'a'}, {'label': 'b'}]},
        )
        self.assertEqual(html, "<ul><li>a</li><li>b</li></ul>")

    def test_list_rendering_from_any_iterable(self):
        pages = make_pages("<#list items as i>${i};</#list>")
        cases = [
            (range(3), "0;1;2;"),
            ({1, 2}, "1;2;"),
            ((x for x in [7]), "7;"),
        ]
        for items, expected in cases:
            with self.subTest(items=type(items).__name__):
                self.assertEqual(self.compositor.compose(pages, {'items': items}), expected)

    def test_generator_is_shared_by_all_pages(self):
        pages = make_pages("<#list items as i>${i}</#list>", "<#list items as i>${i}</#list>")
        html = self.compositor.compose(pages, {'items': (x for x in ['a', 'b'])})
        self.assertEqual(html.count("ab"), 2)

    def test_conditional_rendering(self):
        markup = "<#if notes?has_content>${notes}<#else>none</#if>"
        self.assertEqual(self.compositor.compose(make_pages(markup), {'notes': 'hi'}), "hi")
        self.assertEqual(self.compositor.compose(make_pages(markup), {}), "none")

    def test_deterministic(self):
        pages = make_pages("<p>${a}</p>", "<p>${b.c}</p>")
        params = {'a': 1, 'b': {'c': 2}}
        self.assertEqual(self.compositor.compose(pages, params), self.compositor.compose(pages, params))

    def test_failing_page_fails_composition(self):
        with self.assertRaises(TemplateRenderError) as cm:
            self.compositor.compose(make_pages("<p>ok</p>", "<p>${a[0]}</p>"))
        self.assertEqual(cm.exception.page_name, "Page 2")

    def test_autoescape(self):
        pages = make_pages("<p>${value}</p>")
        params = {'value': '<b>x</b>'}
        self.assertEqual(PageCompositor(autoescape=False).compose(pages, params), "<p><b>x</b></p>")
        self.assertEqual(
            PageCompositor(autoescape=True).compose(pages, params),
            "<p>&lt;b&gt;x&lt;/b&gt;</p>",
        )


class PageCountTestCase(SimpleTestCase):
    """Test cases for PageCompositor.page_count"""

    def setUp(self):
        self.compositor = PageCompositor()

    def test_counts_non_empty_pages(self):
        self.assertEqual(self.compositor.page_count(make_pages("a", "", "b")), 2)

    def test_minimum_is_one(self):
        self.assertEqual(self.compositor.page_count([]), 1)
        self.assertEqual(self.compositor.page_count(make_pages("", "")), 1)


class ComposeSinglePageTestCase(SimpleTestCase):
    """Test cases for PageCompositor.compose_single_page"""

    def setUp(self):
        self.compositor = PageCompositor(autoescape=False)

    def test_selects_page_by_position(self):
        pages = make_pages("<p>one ${n}</p>", "<p>two ${n}</p>")
        self.assertEqual(self.compositor.compose_single_page(pages, 2, {'n': 7}), "<p>two 7</p>")

    def test_single_page_has_no_page_break(self):
        pages = make_pages("<p>one</p>", "<p>two</p>")
        self.assertNotIn(PAGE_BREAK_DIRECTIVE, self.compositor.compose_single_page(pages, 2))

    def test_out_of_range(self):
        pages = make_pages("<p>one</p>", "<p>two</p>")
        for page_number in [0, -1, 3, None, '1', 1.0, True]:
            with self.subTest(page_number=page_number):
                with self.assertRaises(InvalidPageNumber):
                    self.compositor.compose_single_page(pages, page_number)

    def test_invalid_page_number_message(self):
        with self.assertRaises(InvalidPageNumber) as cm:
            self.compositor.compose_single_page(make_pages("<p>one</p>"), 2)
        self.assertEqual(str(cm.exception), "Invalid page number: 2. Template has 1 pages.")
        self.assertEqual(cm.exception.page_count, 1)

    def test_empty_selected_page_gives_placeholder(self):
        pages = make_pages("", "<p>two</p>")
        # one non-empty page, so only page 1 is valid and it is the empty one
        self.assertEqual(self.compositor.compose_single_page(pages, 1), EMPTY_PAGE)

    def test_template_without_pages(self):
        self.assertEqual(self.compositor.compose_single_page([], 1), EMPTY_PAGE)
