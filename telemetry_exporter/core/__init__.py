"""Pacote core: orquestração do processo hospedeiro.

Contém o loop de amostragem e o parsing de argumentos.
"""

from .core import run_loop

__all__ = ["run_loop"]
