"""Threshold rules that turn a metrics summary into recommendations.

`generate_insights` is pure: the same summary always yields the same list in
the same order. Dimension buckets are visited in sorted key order.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from treino.models.insights import Insight, MetricsSummary

HIGH_REJECTION_RATE = 20.0
LOW_REJECTION_RATE = 5.0
REJECTION_SPIKE_PERCENT = 30.0
REJECTION_DROP_PERCENT = -20.0
DOMINANT_REASON_PERCENT = 40.0
LOW_QUALITY_SCORE = 70.0
HIGH_QUALITY_SCORE = 90.0
LEVEL_MIN_REJECTIONS, LEVEL_SHARE = 10, 0.3
DAY_TYPE_MIN_REJECTIONS, DAY_TYPE_SHARE = 5, 0.25
MUSCLE_MIN_REJECTIONS, MUSCLE_SHARE = 5, 0.2
HIGH_CORRECTION_RATE = 95.0
LOW_CORRECTION_RATE = 80.0


def _reason_insight(
    severity: str,
    title: str,
    what: str,
    suggestion: str,
    insight_type: str = "problem",
) -> Callable[[str, float], Insight]:
    def build(reason: str, percentage: float) -> Insight:
        return Insight(
            type=insight_type,  # type: ignore[arg-type]
            severity=severity,  # type: ignore[arg-type]
            title=title,
            description=f"{percentage:.1f}% das rejeições são por {what}.",
            suggestion=suggestion,
            metric=reason,
        )

    return build


# One entry per rejection reason.
_REASON_INSIGHTS: Dict[str, Callable[[str, float], Insight]] = {
    "excesso_exercicios_nivel": _reason_insight(
        "high",
        "Excesso de exercícios para o nível: problema recorrente",
        "dias com mais exercícios do que o teto do nível de atividade",
        "Revisar o volume diário em levels.LEVEL_RULES e garantir que o gerador corta os slots de menor prioridade antes de ultrapassar o teto.",
    ),
    "dias_mesmo_tipo_exercicios_diferentes": _reason_insight(
        "medium",
        "Inconsistência entre dias do mesmo tipo",
        "dias do mesmo tipo terem exercícios diferentes",
        "Verificar se correct_same_type_days_exercises está sendo chamado antes da revalidação. Garantir que todos os dias do mesmo tipo são padronizados.",
    ),
    "tempo_treino_excede_disponivel": _reason_insight(
        "high",
        "Treinos mais longos que o tempo disponível",
        "sessões que excedem o tempo disponível do usuário",
        "Revisar o ajuste de tempo do gerador: reduzir descansos até 45 s, remover isolados do fim do dia e cortar séries antes de entregar o plano.",
    ),
    "contract_violation": _reason_insight(
        "medium",
        "Planos abaixo do mínimo estrutural",
        "violações de contrato de grupo muscular",
        "Conferir se o gerador prioriza os padrões de movimento obrigatórios (knee_dominant, hip_dominant, horizontal_pull, vertical_pull) e se o catálogo tem opções suficientes para o local de treino.",
        insight_type="warning",
    ),
    "ordem_exercicios_invalida": _reason_insight(
        "medium",
        "Ordem de exercícios incorreta",
        "ordem inválida de grupos musculares no dia",
        "Garantir que os slots do dia seguem a ordem grandes grupos, grupos médios e depois braços ou panturrilhas.",
    ),
    "grupo_obrigatorio_ausente": _reason_insight(
        "high",
        "Grupos obrigatórios ausentes",
        "dias sem um grupo muscular obrigatório",
        "Verificar se o corte de volume e o ajuste de tempo preservam ao menos um exercício de cada grupo obrigatório do tipo de dia.",
    ),
    "distribuicao_inteligente_invalida": _reason_insight(
        "medium",
        "Distribuição de volume desequilibrada",
        "distribuição de exercícios desequilibrada entre os músculos do dia",
        "Limitar braços a 30% dos exercícios em dias push/pull e cada músculo a 50% em dias de pernas.",
        insight_type="warning",
    ),
    "excesso_exercicios_musculo_primario": _reason_insight(
        "medium",
        "Excesso de exercícios para o mesmo músculo",
        "excesso de exercícios para um mesmo músculo primário",
        "Revisar max_exercises_per_muscle por nível e o limite de slots por grupo no gerador.",
        insight_type="warning",
    ),
    "numero_dias_incompativel": _reason_insight(
        "high",
        "Número de dias diferente do solicitado",
        "planos com número de dias diferente do solicitado",
        "Verificar se a quantidade de dias do perfil chega intacta ao gerador e ao validador.",
    ),
    "divisao_incompativel_frequencia": _reason_insight(
        "medium",
        "Divisão incompatível com a frequência",
        "divisões incompatíveis com a frequência semanal",
        "Usar Full Body até 3 dias, Upper/Lower com 4 dias e PPL a partir de 5 dias.",
    ),
    "weeklySchedule_invalido": _reason_insight(
        "high",
        "Planos sem programação semanal",
        "planos vazios ou sem dias de treino",
        "Garantir que o gerador sempre devolve um dia por dia de treino e que a resposta não é descartada antes da validação.",
    ),
    "dia_sem_exercicios": _reason_insight(
        "high",
        "Dias de treino vazios",
        "dias sem nenhum exercício",
        "Verificar se o filtro por local de treino e as restrições articulares deixam exercícios suficientes no catálogo para cada tipo de dia.",
    ),
    "exercicios_insuficientes_dia": _reason_insight(
        "medium",
        "Poucos exercícios por dia",
        "dias com menos de 3 exercícios",
        "Impedir que o ajuste de tempo remova exercícios abaixo de 3 por dia e cortar séries antes de cortar exercícios.",
    ),
    "exercicio_sem_primaryMuscle": _reason_insight(
        "medium",
        "Exercícios sem músculo primário",
        "exercícios sem músculo primário informado",
        "Preencher primary_muscle em todas as entradas do catálogo e copiar o campo do template ao montar o exercício.",
    ),
    "exercicio_duplicado": _reason_insight(
        "medium",
        "Exercícios repetidos no mesmo dia",
        "exercícios repetidos dentro de um mesmo dia",
        "Manter o conjunto de nomes já usados no dia durante a seleção e comparar nomes normalizados, sem acentos e sem diferença de maiúsculas.",
    ),
    "grupo_muscular_proibido": _reason_insight(
        "high",
        "Grupos musculares fora do tipo de dia",
        "exercícios de grupos proibidos para o tipo de dia",
        "Revisar os slots de cada tipo de dia: sem peito, costas ou braços em dias de pernas, sem costas ou bíceps no push e sem peito ou tríceps no pull.",
    ),
    "lower_sem_grupos_obrigatorios": _reason_insight(
        "high",
        "Dias de pernas sem grupos de perna",
        "dias de pernas sem quadríceps, posterior de coxa ou glúteos",
        "Garantir que o dia de pernas tem ao menos um exercício de quadríceps, posterior ou glúteos disponível no local de treino e compatível com limitações de joelho.",
    ),
    "full_body_sem_grupos_obrigatorios": _reason_insight(
        "high",
        "Dias Full Body incompletos",
        "dias Full Body sem peito, costas, pernas ou ombros",
        "Reservar um slot por região no Full Body e não remover o último exercício de uma região durante o corte de volume ou de tempo.",
    ),
    "exercicio_musculo_incompativel": _reason_insight(
        "medium",
        "Músculo primário incompatível com o exercício",
        "exercícios classificados com o músculo primário errado",
        "Corrigir o primary_muscle das entradas do catálogo cujo nome indica outro grupo muscular.",
    ),
    "secondaryMuscles_excede_limite": _reason_insight(
        "low",
        "Excesso de músculos secundários",
        "exercícios com músculos secundários acima do limite",
        "Limitar secondary_muscles no catálogo a 3 para exercícios estruturais e a 2 para isolados.",
        insight_type="warning",
    ),
}


def _share(count: int, total: int) -> float:
    return count / total if total > 0 else 0.0


def _reason_specific(reason: str, percentage: float) -> Optional[Insight]:
    build = _REASON_INSIGHTS.get(reason)
    return build(reason, percentage) if build else None


def generate_insights(summary: MetricsSummary) -> List[Insight]:
    current = summary.current
    previous = summary.previous
    insights: List[Insight] = []

    if current.rejection_rate > HIGH_REJECTION_RATE:
        insights.append(Insight(
            type="problem",
            severity="high",
            title="Taxa de rejeição alta",
            description=f"{current.rejection_rate:.1f}% dos planos estão sendo rejeitados. Isso indica problemas na geração ou validação.",
            suggestion="Revisar os motivos de rejeição mais frequentes e os limites por nível de atividade.",
            metric="rejection_rate",
        ))
    elif current.rejection_rate < LOW_REJECTION_RATE and previous is not None and summary.trends.rejection_rate == "decreasing":
        insights.append(Insight(
            type="success",
            severity="low",
            title="Taxa de rejeição excelente",
            description=f"Taxa de rejeição de {current.rejection_rate:.1f}% está muito baixa. Sistema funcionando bem.",
            metric="rejection_rate",
        ))

    if previous is not None and previous.total_rejections > 0:
        change = (current.total_rejections - previous.total_rejections) / previous.total_rejections * 100
        if change > REJECTION_SPIKE_PERCENT:
            insights.append(Insight(
                type="warning",
                severity="high",
                title="Aumento significativo de rejeições",
                description=(
                    f"Rejeições aumentaram {change:.1f}% em relação ao período anterior "
                    f"({previous.total_rejections} → {current.total_rejections})."
                ),
                suggestion="Investigar mudanças recentes no gerador ou no validador e verificar se há novos padrões de erro.",
                trend="increasing",
                change_percent=round(change, 1),
            ))
        elif change < REJECTION_DROP_PERCENT:
            insights.append(Insight(
                type="success",
                severity="medium",
                title="Redução significativa de rejeições",
                description=f"Rejeições diminuíram {abs(change):.1f}% em relação ao período anterior.",
                trend="decreasing",
                change_percent=round(change, 1),
            ))

    if current.top_rejection_reasons:
        top = current.top_rejection_reasons[0]
        if top.percentage > DOMINANT_REASON_PERCENT:
            insight = _reason_specific(top.reason, top.percentage)
            if insight is not None:
                insights.append(insight)

    if current.total_quality_metrics > 0:
        score = current.average_quality_score
        if score < LOW_QUALITY_SCORE:
            insights.append(Insight(
                type="problem",
                severity="high",
                title="Score de qualidade baixo",
                description=f"Score médio de qualidade está em {score:.1f}/100. Planos estão sendo gerados com muitas concessões.",
                suggestion="Analisar os warnings SOFT e FLEXIBLE mais comuns e ampliar o catálogo para os locais de treino afetados.",
                metric="quality_score",
            ))
        elif score >= HIGH_QUALITY_SCORE:
            insights.append(Insight(
                type="success",
                severity="low",
                title="Score de qualidade excelente",
                description=f"Score médio de {score:.1f}/100 indica que os planos estão sendo gerados com alta qualidade.",
                metric="quality_score",
            ))

    total = current.total_rejections
    for level in sorted(current.by_activity_level):
        data = current.by_activity_level[level]
        share = _share(data.rejections, total)
        if data.rejections > LEVEL_MIN_REJECTIONS and share > LEVEL_SHARE:
            insights.append(Insight(
                type="warning",
                severity="medium",
                title=f'Nível "{level}" com muitas rejeições',
                description=f"{data.rejections} rejeições ({share * 100:.1f}%) ocorrem no nível {level}.",
                suggestion=f"Revisar limites e validações específicas para o nível {level}.",
                affected_levels=[level],
            ))
        if current.total_quality_metrics > 0 and 0 < data.quality_score < LOW_QUALITY_SCORE:
            insights.append(Insight(
                type="warning",
                severity="medium",
                title=f'Qualidade baixa para nível "{level}"',
                description=f"Score de qualidade de {data.quality_score:.1f}/100 para nível {level} está abaixo do ideal.",
                suggestion=f"Revisar a geração de planos para o nível {level} e verificar se há restrições excessivas.",
                affected_levels=[level],
                metric="quality_score",
            ))

    for day_type in sorted(current.by_day_type):
        data = current.by_day_type[day_type]
        share = _share(data.rejections, total)
        if data.rejections > DAY_TYPE_MIN_REJECTIONS and share > DAY_TYPE_SHARE:
            insights.append(Insight(
                type="warning",
                severity="medium",
                title=f'Dias "{day_type}" com muitas rejeições',
                description=f"{data.rejections} rejeições ({share * 100:.1f}%) ocorrem em dias {day_type}.",
                suggestion=f"Revisar a montagem de dias {day_type} e as validações específicas deste tipo.",
                affected_day_types=[day_type],
            ))

    for muscle in sorted(current.by_muscle):
        data = current.by_muscle[muscle]
        share = _share(data.rejections, total)
        if data.rejections > MUSCLE_MIN_REJECTIONS and share > MUSCLE_SHARE:
            insights.append(Insight(
                type="warning",
                severity="medium",
                title=f'Músculo "{muscle}" causando muitas rejeições',
                description=f"{data.rejections} rejeições ({share * 100:.1f}%) estão relacionadas ao músculo {muscle}.",
                suggestion=f"Revisar os limites por sessão para {muscle} e as opções do catálogo para este grupo.",
                affected_muscles=[muscle],
            ))

    if total > 0:
        rate = current.correction_success_rate
        if rate > HIGH_CORRECTION_RATE:
            insights.append(Insight(
                type="success",
                severity="low",
                title="Sistema de correção funcionando muito bem",
                description=f"{rate:.1f}% dos planos são corrigidos automaticamente.",
                metric="correction_success_rate",
            ))
        elif rate < LOW_CORRECTION_RATE:
            insights.append(Insight(
                type="warning",
                severity="medium",
                title="Taxa de correção pode melhorar",
                description=f"Apenas {rate:.1f}% dos planos são corrigidos automaticamente.",
                suggestion="Revisar a correção automática e verificar se correct_same_type_days_exercises cobre os dias divergentes.",
                metric="correction_success_rate",
            ))

    return insights
