# src/eegflow/core/__init__.py
"""
Core do EEGflow.

Componentes principais:
    - pipeline     → Step, contexto de execução, registry e histórico
    - engine       → Pipeline (Gate → Dispatch → Execute → Record) e lote
    - config       → carga, merge, hashing e montagem declarativa
    - traceability → resumo serializável de execuções

Limites explícitos:
    - Não contém algoritmos de processamento de sinal
    - Não depende de notebooks, CLI ou serviços externos
"""
