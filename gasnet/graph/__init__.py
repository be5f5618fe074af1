"""Graph primitives.

``builder`` projects the Entity Store into a ``NetworkGraph``; ``convert``
exports a built graph to NetworkX.
"""
