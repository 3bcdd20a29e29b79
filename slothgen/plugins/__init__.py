"""Core SLO plugins: SLI, metadata and alert rules, plus debug and no-op."""