# -*- coding: utf-8 -*-
"""
Property-Based Tests für die numerische Bridge.

Diese Tests validieren Invarianten, die für jede native Bibliothek hinter
der Bridge gelten müssen:
- Bit-exakter Round-Trip host -> native -> host
- Layout-Unabhängigkeit (C- vs. Fortran-Ordnung)
- Determinismus der Referenz-Kerne
"""
