"""Core audio pipeline: data types, quantizer, WAV writer, orchestrator.

WHY: The core is the only non-trivial engineering in the converter —
turning decoded float planes into a byte-exact 16-bit PCM WAV file. It
has no file, network, or environment dependencies so it can be tested
with fake decoders and reused by any shell.

HOW: models.py defines the data types, pcm.py interleaves and quantizes,
wav.py builds/reads the 44-byte header and assembles the file,
orchestrator.py sequences the stages and classifies failures, and
errors.py holds the error taxonomy.

RULES:
- Data types are immutable once built
- Every failure is a ConversionError subclass
- Decoding is the only stage that awaits
"""
