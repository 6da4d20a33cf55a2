# Services package init
"""
StudyNotes Backend: Services Layer
====================================

Service Inventory:
    - Summarizer (summarizer.py): picks the provider named by LLM_PROVIDER and
      returns its Markdown summary
    - SummarizationProvider (llm_base.py): shared credential check and HTTP plumbing
    - GroqService, OpenAIService, GeminiService, HuggingFaceService: one adapter per API
    - prompts.py: the fixed Korean summarization prompt
    - StorageService: upload validation, storage, reading and cleanup of study files
    - NoteService: upload → store → summarize → persist workflow
    - SearchService: full-text search over note titles and files
"""
