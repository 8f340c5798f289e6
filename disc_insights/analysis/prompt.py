# disc_insights/analysis/prompt.py
"""
Prompt construction and response parsing for the behavior analysis.

The model is asked for a fixed JSON object:
    summary, strengths[], developmentAreas[], workStyleInsights,
    teamDynamicsInsights, traitDescriptions{trait id: text}
"""
import json
import logging
import re
from datetime import date
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MESSAGE = """You are an expert behavioral psychologist specializing in professional development.
Your task is to analyze professional behavior traits and provide insightful, personalized analysis.
You should write in Portuguese (Brazil) and maintain a professional, supportive tone.
Your analysis should be specific to the data provided, avoid generic statements, and provide actionable insights.
Structure your response in the exact JSON format requested in the user's prompt."""

STRING_FIELDS = ("summary", "workStyleInsights", "teamDynamicsInsights")
LIST_FIELDS = ("strengths", "developmentAreas")

_JSON_FENCE_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")

_OUTPUT_FORMAT = """
## Formato de Saída Esperado
Por favor, estruture sua resposta no seguinte formato JSON:

```json
{
  "summary": "Um parágrafo detalhado resumindo o perfil comportamental do usuário",
  "strengths": ["Força 1", "Força 2", "Força 3", "Força 4"],
  "developmentAreas": ["Área de desenvolvimento 1", "Área de desenvolvimento 2", "Área de desenvolvimento 3"],
  "workStyleInsights": "Uma análise do estilo de trabalho baseada nos traços identificados",
  "teamDynamicsInsights": "Como este perfil provavelmente interage em equipes e ambientes colaborativos",
  "traitDescriptions": {
    "1": "Descrição personalizada do traço 1 para este usuário, incluindo como se manifesta e quando é benéfico ou desafiador",
    "2": "Descrição personalizada do traço 2",
    // Outras descrições de traços relevantes...
  }
}
```

Observe que o campo 'traitDescriptions' deve conter apenas os 5-7 traços mais significativos ou definidores do perfil, não todos os traços medidos.
"""


def generate_behavior_analysis_prompt(
    traits: Mapping[int, float],
    trait_metadata: Mapping[int, Mapping[str, Any]],
    frequencies: Optional[Mapping[str, float]] = None,
    user_name: Optional[str] = None,
    assessment_date: Optional[date] = None,
) -> str:
    """Builds the Portuguese markdown prompt sent to the completion interface."""
    assessment_date = assessment_date or date.today()
    name_line = f"Nome: {user_name}" if user_name else "Nome: [Nome do usuário não fornecido]"
    frequency_note = (
        f"Adicionalmente, foram avaliadas {len(frequencies)} frequências de comportamentos específicos."
        if frequencies else ""
    )

    intro = f"""
# Behavior Analysis Request for Professional Development

## Profile Information
{name_line}
Data da avaliação: {assessment_date.strftime('%d/%m/%Y')}

## Background
Este é um relatório de análise comportamental profissional. O usuário respondeu a um questionário com {len(traits)} perguntas de traços comportamentais em uma escala de 1-5, onde cada extremo representa tendências opostas. {frequency_note}

## Instruções
Analise os dados fornecidos e gere um relatório detalhado em português do Brasil sobre o perfil comportamental profissional do usuário. O relatório deve ser escrito em um tom profissional, mas acessível, destacando insights práticos que possam ajudar no desenvolvimento profissional.

Por favor, evite frases genéricas. Base sua análise apenas nos dados fornecidos e enfatize a singularidade do perfil.
"""

    lines = [
        "\n## Dados de Traços Comportamentais",
        "Cada traço é medido em uma escala de 1-5, onde:",
        "- 1: Forte tendência para o traço da esquerda",
        "- 3: Equilíbrio entre os traços",
        "- 5: Forte tendência para o traço da direita",
        "",
    ]
    for trait_id, metadata in trait_metadata.items():
        value = traits.get(int(trait_id)) or 3
        lines.append(
            f"{metadata['leftTrait']} (1) vs {metadata['rightTrait']} (5): {value} [Categoria: {metadata['category']}]"
        )
    traits_section = "\n".join(lines) + "\n"

    frequency_section = ""
    if frequencies:
        freq_lines = [
            "\n## Dados de Frequência de Comportamentos",
            "Cada comportamento é medido em uma escala de 1-5, onde:",
            "- 1: Nunca",
            "- 2: Raramente",
            "- 3: Às vezes",
            "- 4: Frequentemente",
            "- 5: Sempre",
            "",
        ]
        freq_lines.extend(f"{trait}: {value}" for trait, value in frequencies.items())
        frequency_section = "\n".join(freq_lines) + "\n"

    return f"{intro}{traits_section}{frequency_section}{_OUTPUT_FORMAT}"


def parse_behavior_analysis_response(response_text: Optional[str]) -> Optional[Any]:
    """
    Extracts the JSON payload from a completion.

    A ```json fenced block is preferred; otherwise the whole text is parsed.
    Returns None when nothing parseable is found.
    """
    if not response_text:
        return None
    match = _JSON_FENCE_RE.search(response_text)
    json_content = match.group(1) if match else response_text
    try:
        return json.loads(json_content)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Error parsing completion as JSON: {e}")
        return None


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def coerce_analysis(parsed: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Forces a parsed completion into the analysis record shape.

    String fields are stringified, list fields keep only their string items and
    traitDescriptions keeps only string values under string keys.
    """
    record: Dict[str, Any] = {field: _stringify(parsed.get(field)) for field in STRING_FIELDS}
    for field in LIST_FIELDS:
        items = parsed.get(field)
        record[field] = [item for item in items if isinstance(item, str)] if isinstance(items, list) else []

    descriptions = parsed.get("traitDescriptions")
    if isinstance(descriptions, dict):
        record["traitDescriptions"] = {
            str(key): value for key, value in descriptions.items() if isinstance(value, str)
        }
    else:
        record["traitDescriptions"] = {}
    return record


def is_valid_analysis(record: Any) -> bool:
    """A record is usable when it is an object with a non-empty summary."""
    return isinstance(record, dict) and bool(record.get("summary"))


EXAMPLE_ANALYSIS: Dict[str, Any] = {
    "summary": "O perfil comportamental analisado revela uma pessoa naturalmente colaborativa e orientada às pessoas, com tendência a ser metódica e analítica. Sua abordagem equilibrada entre assumir riscos e cautela demonstra maturidade em processos decisórios, enquanto sua forte inclinação para consistência sugere valorização de estabilidade e previsibilidade. Nota-se também sua predileção por harmonia e construção de relacionamentos, o que o torna particularmente valioso em ambientes que requerem trabalho em equipe e processos bem estabelecidos. Esse conjunto de características forma um profissional que provavelmente se destaca na implementação cuidadosa de projetos, mantendo bons relacionamentos interpessoais enquanto garante qualidade e eficiência.",
    "strengths": [
        "Capacidade excepcional de construir e manter relacionamentos profissionais positivos",
        "Confiabilidade e consistência na entrega de resultados",
        "Abordagem equilibrada e madura em relação à tomada de riscos",
        "Habilidade para trabalho metódico com alto padrão de qualidade",
        "Forte orientação para colaboração e trabalho em equipe",
    ],
    "developmentAreas": [
        "Encontrar oportunidades para aplicar pensamento criativo e inovador quando apropriado",
        "Desenvolver maior flexibilidade para se adaptar a ambientes de trabalho em constante mudança",
        "Cultivar assertividade em momentos que exigem posicionamento mais firme",
        "Balancear a orientação aos detalhes com visão mais estratégica em situações complexas",
    ],
    "workStyleInsights": "O estilo de trabalho apresentado caracteriza-se pela meticulosidade e atenção aos relacionamentos. A preferência por estabilidade indica valorização de ambientes previsíveis com processos claros. Sua tendência à consistência, combinada com abordagem colaborativa, o posiciona como alguém que busca qualidade e harmonia simultaneamente. Este é um perfil particularmente adequado para funções que exigem confiabilidade, precisão e manutenção de boas relações com stakeholders, como gerenciamento de processos, operações ou funções de suporte especializado.",
    "teamDynamicsInsights": "Em contextos de equipe, este perfil provavelmente se destaca como um colaborador confiável que contribui positivamente para o clima interpessoal e a qualidade das entregas. Sua natureza amigável facilita a comunicação, enquanto sua consistência permite que assuma responsabilidade por processos importantes. Em situações de conflito, tende a adotar uma abordagem conciliadora, buscando soluções que preservem relacionamentos. Sua estabilidade o torna um elemento importante em equipes, proporcionando continuidade e confiabilidade. Para maximizar seu potencial em dinâmicas de grupo, este perfil se beneficiaria de ambientes que valorizam tanto relacionamentos positivos quanto excelência técnica.",
    "traitDescriptions": {
        "1": "A tendência para ser amigável em vez de crítico se manifesta em uma abordagem primariamente orientada às pessoas. Isso sugere priorização de harmonia e relacionamentos positivos, possivelmente buscando consenso e mediação em situações de tensão. Este traço é particularmente valioso em funções que requerem colaboração e construção de relacionamentos, embora em algumas situações possa se beneficiar de uma abordagem mais direta quando necessário para impulsionar melhorias.",
        "5": "A forte tendência para consistência em vez de criatividade revela uma preferência significativa por ambientes estáveis e processos previsíveis. Este traço o torna extremamente confiável em termos de manutenção de padrões e procedimentos estabelecidos, sendo particularmente valioso em funções que exigem precisão e conformidade. Contudo, em situações que demandam inovação ou soluções não convencionais, pode se beneficiar do desenvolvimento deliberado de abordagens mais criativas.",
        "7": "O equilíbrio entre assumir riscos e ser cauteloso demonstra uma abordagem ponderada frente a situações de incerteza. Esta característica sugere maturidade decisória, permitindo avaliar oportunidades com otimismo realista. Em contextos profissionais, este traço se traduz em decisões que nem são excessivamente conservadoras nem imprudentemente arriscadas, representando um valioso ponto médio entre avanço e proteção.",
        "3": "A preferência moderada por trabalho em equipe em vez de autonomia indica valorização da colaboração e esforços coletivos. Este traço sugere capacidade de integração e contribuição em dinâmicas de grupo, sendo particularmente valioso em funções que requerem cooperação e alinhamento entre diferentes stakeholders. Esta orientação colaborativa fortalece a capacidade de construir relacionamentos profissionais produtivos.",
        "9": "A tendência para análise aprofundada em vez de rapidez indica uma preferência por abordagens meticulosas e bem fundamentadas. Esta característica o torna particularmente eficaz em ambientes que valorizam precisão e qualidade acima da velocidade. Em contextos profissionais, este traço permite identificação de detalhes importantes e consideração cuidadosa de implicações antes da tomada de decisões.",
    },
}
