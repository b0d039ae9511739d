# SPDX-License-Identifier: GPL-3.0-or-later
"""Load and dump the block document format to and from a GtkTextBuffer."""

import json

import gi
gi.require_version('Gtk', '4.0')
from gi.repository import Gtk

from noet.document import parse_document


FORMAT_TAGS = {
    'bold': {'weight': 700},
    'italic': {'style': 2},  # Pango.Style.ITALIC
    'underline': {'underline': 1},  # Pango.Underline.SINGLE
    'strikethrough': {'strikethrough': True},
}


def ensure_tags(text_buffer):
    table = text_buffer.get_tag_table()
    for name, props in FORMAT_TAGS.items():
        if table.lookup(name) is None:
            text_buffer.create_tag(name, **props)
    if table.lookup('bullet') is None:
        text_buffer.create_tag('bullet', left_margin=16)


def load_document(text_buffer, content):
    """Replace the buffer's text with a document."""
    text_buffer.set_text('')
    blocks = parse_document(content)
    if blocks is None:
        text_buffer.set_text(content)
        return

    ensure_tags(text_buffer)
    table = text_buffer.get_tag_table()

    for index, block in enumerate(blocks):
        if index > 0:
            text_buffer.insert(text_buffer.get_end_iter(), '\n')
        block_start = text_buffer.get_end_iter().get_offset()

        for run in block.get('runs', []):
            text = run.get('text', '')
            if not text:
                continue
            run_start = text_buffer.get_end_iter().get_offset()
            text_buffer.insert(text_buffer.get_end_iter(), text)
            for name in run.get('tags', []):
                if name in FORMAT_TAGS:
                    text_buffer.apply_tag(
                        table.lookup(name),
                        text_buffer.get_iter_at_offset(run_start),
                        text_buffer.get_end_iter(),
                    )

        if block.get('type') == 'bullet':
            text_buffer.apply_tag(
                table.lookup('bullet'),
                text_buffer.get_iter_at_offset(block_start),
                text_buffer.get_end_iter(),
            )


def dump_document(text_buffer) -> str:
    """Serialize the buffer, one block per line."""
    bullet = text_buffer.get_tag_table().lookup('bullet')
    blocks = []
    line_count = text_buffer.get_line_count()
    if text_buffer.get_char_count() == 0:
        return json.dumps({'blocks': []})

    for line in range(line_count):
        _, start = text_buffer.get_iter_at_line(line)
        end = start.copy()
        if not end.ends_line():
            end.forward_to_line_end()
        block_type = 'bullet' if bullet and start.has_tag(bullet) else 'paragraph'
        blocks.append({'type': block_type, 'runs': _runs(text_buffer, start, end)})

    return json.dumps({'blocks': blocks})


def _runs(text_buffer, start, end):
    runs = []
    it = start.copy()
    while it.compare(end) < 0:
        tags = _format_names(it)
        run_end = it.copy()
        while run_end.forward_to_tag_toggle(None) and run_end.compare(end) < 0:
            if _format_names(run_end) != tags:
                break
        if run_end.compare(end) > 0 or run_end.is_end():
            run_end = end.copy()
        text = text_buffer.get_text(it, run_end, True)
        if text:
            runs.append({'text': text, 'tags': sorted(tags)})
        if run_end.equal(it):
            break
        it = run_end
    return runs or [{'text': '', 'tags': []}]


def _format_names(text_iter):
    return {
        tag.get_property('name') for tag in text_iter.get_tags()
        if tag.get_property('name') in FORMAT_TAGS
    }
