"""HTML → 터미널용 평문 변환

이메일/코멘트 본문 정규화. 규칙 순서가 결과를 결정한다
(뒤 규칙은 앞 규칙이 정리한 문자열에 적용됨).
"""
import re

# 이름 있는 엔티티만 디코딩 (그 외 숫자 참조는 제거)
NAMED_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
    ("&ldquo;", "\u201c"),
    ("&rdquo;", "\u201d"),
    ("&lsquo;", "\u2018"),
    ("&rsquo;", "\u2019"),
    ("&mdash;", "\u2014"),
    ("&ndash;", "\u2013"),
)

_LINE_ENDINGS = re.compile(r"\r\n?")
_STYLE_BLOCK = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_BR = re.compile(r"<br(?:\s[^>]*)?/?>", re.IGNORECASE)
_PARAGRAPH_BREAK = re.compile(r"</p><p(?:\s[^>]*)?>", re.IGNORECASE)
_BLOCK_TAG = re.compile(
    r"</?(?:p|div|tr|li|ul|ol|blockquote|h[1-6])(?:\s[^>]*)?/?>", re.IGNORECASE
)
_ANY_TAG = re.compile(r"<[^>]+>")
_NUMERIC_REF = re.compile(r"&#\d+;")
# BOM, zero-width space/non-joiner/joiner, soft hyphen, nbsp
_INVISIBLE = re.compile("[\ufeff\u200b\u200c\u200d\u00ad\u00a0]")
_BLANK_LINE = re.compile(r"^[ \t]+$", re.MULTILINE)
_EXTRA_NEWLINES = re.compile(r"\n{3,}")


def html_to_text(html: str) -> str:
    """HTML 조각을 읽기 쉬운 평문으로 변환"""
    if not html:
        return ""

    text = _LINE_ENDINGS.sub("\n", html)
    text = _STYLE_BLOCK.sub("", text)
    text = _BR.sub("\n", text)
    text = _PARAGRAPH_BREAK.sub("\n", text)
    text = _BLOCK_TAG.sub("\n", text)
    text = _ANY_TAG.sub("", text)

    for entity, char in NAMED_ENTITIES:
        text = text.replace(entity, char)

    text = _NUMERIC_REF.sub("", text)
    text = _INVISIBLE.sub(" ", text)
    text = _BLANK_LINE.sub("", text)
    text = _EXTRA_NEWLINES.sub("\n\n", text)
    return text.strip()
