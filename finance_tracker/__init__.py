"""Personal finance tracker backend: receipt upload and OCR-to-transaction pipeline."""
