"""
Translates Neo4j-flavoured Cypher into the dialect accepted by FalkorDB.

Known incompatibilities handled:
1. elementId(n) -> id(n): FalkorDB only exposes id()
2. round(x, precision) AS -> round(x) AS: FalkorDB's round() takes a single argument
3. CALL <proc>(src, $type, {...}, props, tgt) YIELD r -> plain MERGE: FalkorDB has no APOC

The pattern set is small and fixed. Anything else passes through untouched.
"""

import re
from typing import Any, Dict, Tuple

DEFAULT_RELATIONSHIP_TYPE = 'RELATED_TO'

_ELEMENT_ID_PATTERN = re.compile(r'\belementId\s*\(')

# round(<expr>, <digits>) AS -- <expr> may hold nested parens and newlines
_ROUND_PATTERN = re.compile(r'\bround\s*\(([\s\S]*?),\s*(\d+)\s*\)\s*AS\b')

_APOC_MERGE_PATTERN = re.compile(
    r'CALL\s+([\w.]+)\s*\(\s*(\w+)\s*,\s*\$(\w+)\s*,\s*\{[^}]*\}\s*,\s*(\{[^}]*\}|\$\w+)\s*,'
    r'\s*(\w+)(?:\s*,\s*\{[^}]*\})?\s*\)\s*YIELD\s+(\w+)',
    re.IGNORECASE | re.DOTALL)


class CypherTranslator:
    """Rewrite query text and parameters for FalkorDB."""

    @staticmethod
    def translate(query: str, params: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """
        Translate a Cypher query and its params from Neo4j dialect to FalkorDB dialect.

        Args:
            query: Cypher query text
            params: Query parameters (not mutated)

        Returns:
            Tuple of (translated query, translated params)
        """
        translated_params = dict(params or {})

        translated = CypherTranslator.translate_element_id(query)
        translated = CypherTranslator.translate_round(translated)
        translated = CypherTranslator.translate_apoc_merge_relationship(translated, translated_params)

        return translated, translated_params

    @staticmethod
    def translate_element_id(query: str) -> str:
        """elementId(expr) -> id(expr)"""
        return _ELEMENT_ID_PATTERN.sub('id(', query)

    @staticmethod
    def translate_round(query: str) -> str:
        """round(expr, precision) AS -> round(expr) AS"""
        return _ROUND_PATTERN.sub(lambda match: f'round({match.group(1)}) AS', query)

    @staticmethod
    def translate_apoc_merge_relationship(query: str, params: Dict[str, Any]) -> str:
        """
        Replace APOC-style relationship merge procedure calls with a standard MERGE.

        The relationship type is read from params by the captured parameter name and
        removed from params, since the MERGE inlines it.

        Args:
            query: Cypher query text
            params: Mutable params mapping owned by the translator

        Returns:
            Query text with APOC merges rewritten
        """

        def _replace(match: 're.Match[str]') -> str:
            _procedure, source_var, rel_type_param, _props, target_var, yield_var = match.groups()
            rel_type = params.get(rel_type_param)
            if rel_type:
                del params[rel_type_param]
            safe_rel_type = quote_identifier(str(rel_type)) if rel_type else quote_identifier(DEFAULT_RELATIONSHIP_TYPE)
            return f'MERGE ({source_var})-[{yield_var}:{safe_rel_type}]->({target_var})'

        return _APOC_MERGE_PATTERN.sub(_replace, query)


def quote_identifier(name: str) -> str:
    """Backtick-quote a label or relationship type for inlining into Cypher."""
    return '`' + name.replace('`', '``') + '`'
