"""
NLU Module - Utterance understanding and candidate arbitration.

- schemas: Utterance, NLUContext, Candidate
- pipeline: rule-based entity/signal extraction
- arbitrator: first-match-wins selection over ordered rule sources
- rules: the shipped rule sources and their default order
"""
