"""
Quire Backend: Services Layer
==============================

What:  Business logic sitting between the composition root and the database.

Service Inventory:
    Image pipeline (pure, no database):
    - image_format:   FormatDetector + mime derivation
    - shrink_policy:  whether recompression is allowed for a byte stream
    - image_resizer:  Pillow downscale + JPEG re-encode
    - image_pipeline: detector → policy → resizer with fallbacks

    Persistence:
    - image_service:             saves/updates image notes, runs the pipeline detached
    - note_service:              note store (create, labels, content)
    - revision_service:          snapshots before in-place changes
    - option_service:            runtime options (image tunables)
    - protected_session_service: whether protected notes may be created
    - filename:                  upload filename sanitizer
"""
