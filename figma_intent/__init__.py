"""Design-intent extraction for Figma documents.

Subpackages:
- integrations: Tree traversal, semantic role detection, node normalization, component reuse, literal component styles
- tokens: Design token inference (colors, typography, spacing, radius)
- cache: LRU + TTL cache store and the key/TTL policy layered on top of it

Modules:
- pipeline: Cached entry points (normalized nodes, tokens, component/frame maps, page overview,
  component styles, implementation plan)
- planning: Implementation plan built from normalized nodes and tokens
- schemas: Pydantic query models validated by the pipeline entry points
"""
