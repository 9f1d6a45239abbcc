"""
Scan Services

One scan runs these stages in order, each in its own package:

1. capture/ - Browser rendering of the target page
   - page_renderer.py: Navigation tiers, full-page screenshot, snapshot assembly
   - extraction_script.py: In-page script collecting elements and landmark bounds

2. analysis/ - LLM integration
   - ux_analyzer.py: Single prompt per scan, JSON recovery, fixed fallbacks

3. cropping/ - Per-finding screenshots
   - landmark_rules.py: Which page region illustrates which finding
   - region_cropper.py: Padded, clamped crops of the full-page image

4. validation/ - Storage-ready findings
   - result_validator.py: Enum coercion and placeholder defaults

5. persistence/ - Scan and finding rows
   - scan_repository.py: Create, complete, fail, bulk insert

6. orchestration/ - Lifecycle
   - scan_pipeline.py: Stages 1-4, returning a completed or failed outcome
   - scan_orchestrator.py: pending -> completed | failed
   - history.py: History, stats, detail, implemented toggle

utils/json_repair.py extracts the first JSON object from free text.
"""
