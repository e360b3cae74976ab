"""Import orchestration.

- task_group: fail-fast concurrent join
- import_pipeline: the ``Importer`` driving one ingestion run
"""
