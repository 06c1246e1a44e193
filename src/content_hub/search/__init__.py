"""
Search index building and query engine package.

- analyzers: Tokenizers and filters (lowercase, stopwords)
- fuzzy: Edit distance and prefix/fuzzy term expansion
- schema: Searchable fields and boosts
- stats: BM25 scoring statistics
- text_index: In-memory inverted index with AND semantics
- synonyms: Domain query expansion table
- snippet: Plain-text extraction and word-boundary truncation
- indexer: Index artifact build and load
"""
