import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from host_patterns import matches, matches_any


def test_leading_wildcard_matches_subdomain():
    assert matches('*.example.com', 'a.example.com')
    assert matches('*.example.com', 'deep.a.example.com')


def test_leading_wildcard_requires_the_dot():
    assert not matches('*.example.com', 'example.com')


def test_exact_pattern_is_exact():
    assert matches('api.example.com', 'api.example.com')
    assert not matches('api.example.com', 'api.example.com.evil.net')
    assert not matches('api.example.com', 'xapi.example.com')


def test_dots_are_literal():
    assert not matches('a.example.com', 'aXexample.com')


def test_question_mark_matches_one_character():
    assert matches('cdn?.example.com', 'cdn1.example.com')
    assert not matches('cdn?.example.com', 'cdn12.example.com')
    assert not matches('cdn?.example.com', 'cdn.example.com')


def test_case_insensitive():
    assert matches('*.Example.COM', 'static.example.com')


def test_regex_metacharacters_are_escaped():
    assert matches('a+b.com', 'a+b.com')
    assert not matches('a+b.com', 'aab.com')
    assert matches('host:8443', 'host:8443')


def test_matches_any():
    assert matches_any(['foo.com', '*.bar.com'], 'x.bar.com')
    assert not matches_any([], 'x.bar.com')
