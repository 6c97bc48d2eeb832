# src/atlas_forms/core/form/visibility.py
"""
Avaliador de visibilidade de elementos do formulário.

Este módulo resolve se um elemento (campo, seção, lista, aba) é exibido
e quais efeitos colaterais o seu ocultamento implica.

Dois eixos independentes:
    - condicional (`hide` / `visible`): dirigido pelos dados do formulário;
      ocultar limpa o valor e pula a validação
    - acesso (`hide_by_access` / `visible_by_access`): dirigido por
      permissões; ocultar preserva o valor e continua validando

Decisões arquiteturais:
    - Os eixos combinam por OU no lado "oculto"
    - O eixo condicional tem prioridade ao reportar a causa
    - `hide` presente prevalece sobre `visible` dentro do mesmo eixo
    - A variante em lote é disparada por borda (apenas transições)

Invariantes:
    - Sem configuração o elemento é visível e sem efeitos especiais
    - Oculto por condição ⇒ limpa dados e pula validação
    - Oculto só por acesso ⇒ preserva dados e valida

Limites explícitos:
    - Não muta o contexto (o contexto aplica os efeitos)
    - Não captura exceções de predicados computados
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from atlas_forms.core.form.types import VisibilityConfig
from atlas_forms.core.values import resolve


class HiddenBy(str, Enum):
    CONDITIONAL = "conditional"
    ACCESS = "access"


@dataclass(frozen=True)
class VisibilityResult:
    is_visible: bool
    hidden_by: Optional[HiddenBy] = None
    should_clear_data: bool = False
    should_skip_validation: bool = False


VISIBLE = VisibilityResult(is_visible=True)
HIDDEN_BY_CONDITION = VisibilityResult(
    is_visible=False,
    hidden_by=HiddenBy.CONDITIONAL,
    should_clear_data=True,
    should_skip_validation=True,
)
HIDDEN_BY_ACCESS = VisibilityResult(
    is_visible=False,
    hidden_by=HiddenBy.ACCESS,
    should_clear_data=False,
    should_skip_validation=False,
)


def _axis_hidden(hide: Any, visible: Any, ctx: Any) -> bool:
    if hide is not None:
        return bool(resolve(hide, ctx))
    if visible is not None:
        return not bool(resolve(visible, ctx))
    return False


def evaluate_visibility(config: Optional[VisibilityConfig], ctx: Any) -> VisibilityResult:
    if config is None:
        return VISIBLE

    conditional_hidden = _axis_hidden(config.hide, config.visible, ctx)
    access_hidden = _axis_hidden(config.hide_by_access, config.visible_by_access, ctx)

    if conditional_hidden:
        return HIDDEN_BY_CONDITION
    if access_hidden:
        return HIDDEN_BY_ACCESS
    return VISIBLE


def combine_results(results: Iterable[VisibilityResult]) -> VisibilityResult:
    """Combina avaliações de uma cadeia (aba → seção → linha → campo).

    Qualquer ocultamento condicional na cadeia prevalece; depois, acesso.
    """
    hidden_by_access = False
    for result in results:
        if result.hidden_by is HiddenBy.CONDITIONAL:
            return HIDDEN_BY_CONDITION
        if result.hidden_by is HiddenBy.ACCESS:
            hidden_by_access = True
    return HIDDEN_BY_ACCESS if hidden_by_access else VISIBLE


def is_visible(config: Optional[VisibilityConfig], ctx: Any) -> bool:
    return evaluate_visibility(config, ctx).is_visible


def should_skip_validation(config: Optional[VisibilityConfig], ctx: Any) -> bool:
    return evaluate_visibility(config, ctx).should_skip_validation


def should_clear_data(config: Optional[VisibilityConfig], ctx: Any) -> bool:
    return evaluate_visibility(config, ctx).should_clear_data


# ---------------------------------------------------------------------------
# Lote
# ---------------------------------------------------------------------------

def snapshot_visibility(
    configs: Mapping[str, Optional[VisibilityConfig]], ctx: Any
) -> Dict[str, VisibilityResult]:
    return {name: evaluate_visibility(cfg, ctx) for name, cfg in configs.items()}


def _was_clear_eligible(previous: Union[bool, VisibilityResult, None]) -> bool:
    if previous is None:
        return False
    if isinstance(previous, VisibilityResult):
        return previous.should_clear_data
    # snapshot booleano só conhece visível/oculto; oculto conta como já limpo
    return not previous


def fields_to_clear(
    configs: Mapping[str, Optional[VisibilityConfig]],
    ctx: Any,
    previous_visibility: Mapping[str, Union[bool, VisibilityResult]],
) -> List[str]:
    """Campos que ACABARAM de ficar ocultos por condição.

    O snapshot anterior pode conter booleanos (visível/oculto) ou
    `VisibilityResult`. Com resultados completos, um campo que passa de
    oculto por acesso para oculto por condição também é reportado.
    Campos ausentes do snapshot anterior são tratados como visíveis.
    """
    current = {name: evaluate_visibility(cfg, ctx) for name, cfg in configs.items()}
    return transitions_to_clear(current, previous_visibility)


def transitions_to_clear(
    current: Mapping[str, VisibilityResult],
    previous_visibility: Mapping[str, Union[bool, VisibilityResult]],
) -> List[str]:
    return [
        name
        for name, result in current.items()
        if result.should_clear_data and not _was_clear_eligible(previous_visibility.get(name))
    ]


def fields_to_skip_validation(configs: Mapping[str, Optional[VisibilityConfig]], ctx: Any) -> List[str]:
    return [name for name, cfg in configs.items() if should_skip_validation(cfg, ctx)]
