"""Credential document intelligence pipeline.

Classifies uploaded certificates, diplomas, and transcripts, extracts
their fields through a cascade of text extraction backends (embedded PDF
text, Google Cloud Vision, a self-hosted OCR service, local Tesseract),
scores the result, and normalizes field values into canonical forms.
"""
