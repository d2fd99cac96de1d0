"""Plan-generation engine: load model, tables, fatigue, scheduler, assembler."""
