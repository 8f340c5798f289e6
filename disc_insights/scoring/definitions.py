# disc_insights/scoring/definitions.py
# Static definitions for the DISC and behavior trait questionnaires.

DISC_CATEGORIES = ("D", "I", "S", "C")

# --- DISC profiles ---

DISC_PROFILE_DESCRIPTIONS = {
    "D": "Perfil Dominante: Focado em resultados, assertivo e direto. Toma decisões rápidas e enfrenta desafios de frente.",
    "I": "Perfil Influente: Comunicativo, entusiasta e sociável. Motiva pessoas e gera ideias criativas.",
    "S": "Perfil Estável: Paciente, cooperativo e confiável. Mantém a harmonia e oferece suporte consistente.",
    "C": "Perfil Conforme: Preciso, analítico e organizado. Foca em qualidade e atenção aos detalhes.",
}

DISC_PROFILE_NAMES = {
    "D": "Dominância",
    "I": "Influência",
    "S": "Estabilidade",
    "C": "Conformidade",
}

DISC_PROFILE_RECOMMENDATIONS = {
    "D": [
        "Pratique escuta ativa e seja mais paciente com outros",
        "Desenvolva empatia e considere o impacto de suas decisões",
        "Equilibre velocidade com precisão",
    ],
    "I": [
        "Mantenha o foco em detalhes e prazos",
        "Estruture melhor suas ideias antes de compartilhar",
        "Desenvolva habilidades de organização",
    ],
    "S": [
        "Seja mais assertivo ao expressar opiniões",
        "Adapte-se mais rapidamente a mudanças",
        "Tome mais iniciativa em situações desafiadoras",
    ],
    "C": [
        "Desenvolva flexibilidade em processos",
        "Pratique comunicação mais expressiva",
        "Tome decisões com menos análise quando necessário",
    ],
}

DISC_PROFILE_DETAILS = {
    "D": {
        "stressResponse": [
            "Torna-se mais autoritário",
            "Aumenta a impaciência",
            "Pode tomar decisões precipitadas",
            "Tendência a ignorar opiniões contrárias",
            "Intensifica a competitividade",
        ],
        "communicationStyle": [
            "Direto e objetivo",
            "Foca em resultados e metas",
            "Preferência por mensagens curtas",
            "Tom de voz firme e decisivo",
            "Linguagem corporal dominante",
        ],
        "teamContributions": [
            "Estabelece direção clara",
            "Impulsiona mudanças",
            "Toma decisões difíceis",
            "Mantém foco em resultados",
            "Assume responsabilidades",
        ],
        "fearsAndInsecurities": [
            "Medo de perder controle",
            "Receio de ser visto como fraco",
            "Temor de falhar publicamente",
            "Insegurança com dependência de outros",
            "Medo de perder autoridade",
        ],
        "meetingStyle": "Quer chegar ao ponto rapidamente",
        "projectStyle": "Foca em resultados e prazos",
        "conflictStyle": "Enfrenta diretamente",
        "decisionStyle": "Decide rapidamente",
        "careers": [
            "Empreendedorismo",
            "Gestão executiva",
            "Vendas corporativas",
            "Consultoria estratégica",
            "Gestão de projetos",
        ],
        "learningStyle": [
            "Aprendizado prático",
            "Desafios competitivos",
            "Resultados mensuráveis",
            "Autonomia na execução",
            "Feedback direto",
        ],
    },
    "I": {
        "stressResponse": [
            "Torna-se mais emotivo",
            "Aumenta a dispersão",
            "Pode dramatizar situações",
            "Tendência a falar excessivamente",
            "Busca mais aprovação social",
        ],
        "communicationStyle": [
            "Expressivo e animado",
            "Rico em histórias e exemplos",
            "Uso de gestos e expressões faciais",
            "Tom de voz variado e entusiástico",
            "Comunicação informal e pessoal",
        ],
        "teamContributions": [
            "Gera entusiasmo",
            "Promove colaboração",
            "Resolve conflitos interpessoais",
            "Traz energia positiva",
            "Facilita networking",
        ],
        "fearsAndInsecurities": [
            "Medo de rejeição social",
            "Receio de não ser apreciado",
            "Temor de ambientes muito formais",
            "Insegurança com isolamento",
            "Medo de perder popularidade",
        ],
        "meetingStyle": "Participa ativamente e socializa",
        "projectStyle": "Motiva a equipe e gera ideias",
        "conflictStyle": "Busca harmonizar com humor",
        "decisionStyle": "Considera impacto nas pessoas",
        "careers": [
            "Marketing e Publicidade",
            "Relações Públicas",
            "Vendas consultivas",
            "Treinamento e desenvolvimento",
            "Gestão de eventos",
        ],
        "learningStyle": [
            "Aprendizado em grupo",
            "Discussões interativas",
            "Apresentações criativas",
            "Networking",
            "Reconhecimento público",
        ],
    },
    "S": {
        "stressResponse": [
            "Torna-se mais passivo",
            "Aumenta a necessidade de segurança",
            "Pode resistir mais a mudanças",
            "Tendência ao silêncio",
            "Busca mais apoio de outros",
        ],
        "communicationStyle": [
            "Calmo e ponderado",
            "Preferência por diálogos um-a-um",
            "Escuta atenta e empática",
            "Tom de voz suave e estável",
            "Comunicação não-confrontacional",
        ],
        "teamContributions": [
            "Mantém harmonia",
            "Oferece suporte constante",
            "Garante consistência",
            "Fortalece relacionamentos",
            "Promove cooperação",
        ],
        "fearsAndInsecurities": [
            "Medo de mudanças bruscas",
            "Receio de conflitos",
            "Temor de decepcionar outros",
            "Insegurança com pressão",
            "Medo de instabilidade",
        ],
        "meetingStyle": "Ouve atentamente e toma notas",
        "projectStyle": "Mantém organização e consistência",
        "conflictStyle": "Tenta mediar pacificamente",
        "decisionStyle": "Busca consenso",
        "careers": [
            "Recursos Humanos",
            "Serviço ao cliente",
            "Gestão operacional",
            "Educação",
            "Suporte técnico",
        ],
        "learningStyle": [
            "Aprendizado estruturado",
            "Passo a passo",
            "Prática supervisionada",
            "Ambiente seguro",
            "Feedback construtivo",
        ],
    },
    "C": {
        "stressResponse": [
            "Torna-se mais analítico",
            "Aumenta o perfeccionismo",
            "Pode paralisar por análise",
            "Tendência ao isolamento",
            "Busca mais informações",
        ],
        "communicationStyle": [
            "Preciso e detalhado",
            "Foco em fatos e dados",
            "Preferência por comunicação escrita",
            "Tom de voz moderado",
            "Comunicação formal e estruturada",
        ],
        "teamContributions": [
            "Garante qualidade",
            "Previne erros",
            "Desenvolve sistemas",
            "Analisa riscos",
            "Mantém padrões elevados",
        ],
        "fearsAndInsecurities": [
            "Medo de estar errado",
            "Receio de críticas à qualidade",
            "Temor de situações ambíguas",
            "Insegurança com improviso",
            "Medo de falhas técnicas",
        ],
        "meetingStyle": "Analisa dados e faz perguntas técnicas",
        "projectStyle": "Cuida de detalhes e qualidade",
        "conflictStyle": "Analisa causas e busca fatos",
        "decisionStyle": "Analisa todas as opções",
        "careers": [
            "Finanças e Contabilidade",
            "Tecnologia da Informação",
            "Pesquisa e Desenvolvimento",
            "Controle de Qualidade",
            "Planejamento estratégico",
        ],
        "learningStyle": [
            "Aprendizado técnico",
            "Análise detalhada",
            "Documentação completa",
            "Tempo para domínio",
            "Validação de conhecimento",
        ],
    },
}

# --- Behavior trait questionnaire ---
# Trait questions use a 1-5 slider between two poles; frequency questions use
# 1 (Nunca) .. 5 (Sempre).

TRAIT_QUESTIONS = [
    {"id": 1, "type": "trait", "leftTrait": "Sempre crítico", "rightTrait": "Sempre amigável"},
    {"id": 2, "type": "trait", "leftTrait": "Sempre orientado à qualidade", "rightTrait": "Sempre orientado à velocidade"},
    {"id": 3, "type": "trait", "leftTrait": "Sempre autônomo", "rightTrait": "Sempre colaborativo"},
    {"id": 4, "type": "trait", "leftTrait": "Sempre diplomático", "rightTrait": "Sempre honesto"},
    {"id": 5, "type": "trait", "leftTrait": "Sempre criativo", "rightTrait": "Sempre consistente"},
    {"id": 6, "type": "trait", "leftTrait": "Sempre leal", "rightTrait": "Sempre pragmático"},
    {"id": 7, "type": "trait", "leftTrait": "Sempre assumindo riscos", "rightTrait": "Sempre cauteloso"},
    {"id": 8, "type": "trait", "leftTrait": "Sempre assertivo", "rightTrait": "Sempre modesto"},
    {"id": 9, "type": "trait", "leftTrait": "Sempre rápido", "rightTrait": "Sempre analítico"},
    {"id": 10, "type": "trait", "leftTrait": "Sempre emocional", "rightTrait": "Sempre racional"},
    {"id": 11, "type": "trait", "leftTrait": "Sempre seguindo", "rightTrait": "Sempre liderando"},
    {"id": 12, "type": "trait", "leftTrait": "Sempre adaptável", "rightTrait": "Sempre focado em estabilidade"},
    {"id": 13, "type": "trait", "leftTrait": "Sempre metódico", "rightTrait": "Sempre espontâneo"},
    {"id": 14, "type": "trait", "leftTrait": "Sempre orientado a regras", "rightTrait": "Sempre inovador"},
    {"id": 15, "type": "trait", "leftTrait": "Sempre focado no futuro", "rightTrait": "Sempre focado no presente"},
    {"id": 16, "type": "trait", "leftTrait": "Sempre focado em impacto", "rightTrait": "Sempre focado em lucro"},
    {"id": 17, "type": "trait", "leftTrait": "Sempre otimista", "rightTrait": "Sempre realista"},
    {"id": 18, "type": "trait", "leftTrait": "Sempre focado na jornada", "rightTrait": "Sempre focado no destino"},
    {"id": 19, "type": "trait", "leftTrait": "Sempre ouvinte", "rightTrait": "Sempre comunicativo"},
    {"id": 20, "type": "trait", "leftTrait": "Sempre ambicioso", "rightTrait": "Sempre tranquilo"},
    {"id": 21, "type": "trait", "leftTrait": "Sempre reservado", "rightTrait": "Sempre transparente"},
    {"id": 22, "type": "trait", "leftTrait": "Sempre tolerante", "rightTrait": "Sempre exigente"},
    {"id": 23, "type": "trait", "leftTrait": "Sempre autodidata", "rightTrait": "Sempre adepto do aprendizado formal"},
    {"id": 24, "type": "trait", "leftTrait": "Sempre focado no cliente", "rightTrait": "Sempre focado na empresa"},
    {"id": 25, "type": "trait", "leftTrait": "Sempre proativo", "rightTrait": "Sempre reativo"},
    {"id": 26, "type": "trait", "leftTrait": "Sempre orientado a resultados", "rightTrait": "Sempre orientado a regras"},
    {"id": 27, "type": "trait", "leftTrait": "Sempre extrovertido", "rightTrait": "Sempre introvertido"},
    {"id": 28, "type": "trait", "leftTrait": "Sempre casual", "rightTrait": "Sempre atento"},
    {"id": 29, "type": "trait", "leftTrait": "Sempre inovador", "rightTrait": "Sempre tradicional"},
    {"id": 30, "type": "trait", "leftTrait": "Sempre trabalhador", "rightTrait": "Sempre relaxado"},
    {"id": 31, "type": "trait", "leftTrait": "Sempre despreocupado", "rightTrait": "Sempre preciso"},
    {"id": 32, "type": "trait", "leftTrait": "Sempre caótico", "rightTrait": "Sempre perfeccionista"},
    {"id": 33, "type": "trait", "leftTrait": "Sempre organizado", "rightTrait": "Sempre desestruturado"},
    {"id": 34, "type": "trait", "leftTrait": "Sempre impulsivo", "rightTrait": "Sempre deliberado"},
    {"id": 35, "type": "trait", "leftTrait": "Sempre rigoroso", "rightTrait": "Sempre descontraído"},
]

FREQUENCY_QUESTIONS = [
    {"id": 36, "type": "frequency", "trait": "confrontador"},
    {"id": 37, "type": "frequency", "trait": "competitivo"},
    {"id": 38, "type": "frequency", "trait": "persuasivo"},
    {"id": 39, "type": "frequency", "trait": "workaholic"},
    {"id": 40, "type": "frequency", "trait": "persistente"},
]

FREQUENCY_SCALE_LABELS = {1: "Nunca", 2: "Raramente", 3: "Às vezes", 4: "Frequentemente", 5: "Sempre"}

# Short pole labels used when describing a trait to the language model
TRAIT_METADATA = {
    1: ("Crítico", "Amigável"),
    2: ("Orientado à qualidade", "Orientado à velocidade"),
    3: ("Autônomo", "Trabalho em equipe"),
    4: ("Diplomático", "Honesto"),
    5: ("Criativo", "Consistente"),
    6: ("Leal", "Pragmático"),
    7: ("Assume riscos", "Cauteloso"),
    8: ("Assertivo", "Modesto"),
    9: ("Rápido", "Analítico"),
    10: ("Emocional", "Racional"),
    11: ("Seguidor", "Líder"),
    12: ("Adaptável", "Estável"),
    13: ("Metódico", "Espontâneo"),
    14: ("Orientado a regras", "Inovador"),
    15: ("Focado no futuro", "Focado no presente"),
    16: ("Focado em impacto", "Focado em lucro"),
    17: ("Otimista", "Realista"),
    18: ("Focado na jornada", "Focado no destino"),
    19: ("Ouvinte", "Comunicativo"),
    20: ("Ambicioso", "Tranquilo"),
    21: ("Reservado", "Transparente"),
    22: ("Tolerante", "Exigente"),
    23: ("Autodidata", "Adepto do aprendizado formal"),
    24: ("Focado no cliente", "Focado na empresa"),
    25: ("Proativo", "Reativo"),
    26: ("Orientado a resultados", "Orientado a regras"),
    27: ("Extrovertido", "Introvertido"),
    28: ("Casual", "Atento"),
    29: ("Inovador", "Tradicional"),
    30: ("Trabalhador", "Relaxado"),
    31: ("Despreocupado", "Preciso"),
    32: ("Caótico", "Perfeccionista"),
    33: ("Organizado", "Desestruturado"),
    34: ("Impulsivo", "Deliberado"),
    35: ("Rigoroso", "Descontraído"),
}

TRAIT_CATEGORIES = {
    1: "analytical",
    2: "strategic",
    3: "collaboration",
    4: "communication",
    5: "innovation",
    6: "execution",
    7: "risk",
    8: "leadership",
    9: "decision",
    10: "emotional",
    29: "adaptability",
}

TRAIT_TENDENCIES = {
    1: ("análise crítica e objetividade", "construção de relacionamentos e empatia"),
    2: ("busca por excelência e qualidade", "foco em agilidade e eficiência"),
    3: ("autonomia e independência", "colaboração e trabalho em equipe"),
    4: ("diplomacia e abordagem tática", "comunicação direta e assertiva"),
    5: ("inovação e pensamento criativo", "estabilidade e consistência"),
    6: ("lealdade e compromisso", "pragmatismo e praticidade"),
    7: ("disposição para assumir riscos", "cautela e prudência"),
    8: ("assertividade e expressão direta", "modéstia e discrição"),
    9: ("rapidez na execução", "profundidade analítica"),
    10: ("sensibilidade e intuição emocional", "racionalidade e lógica"),
    11: ("capacidade de seguir diretrizes", "habilidade de liderança"),
    12: ("flexibilidade e adaptabilidade", "foco em estabilidade e consistência"),
    13: ("abordagem metódica e estruturada", "espontaneidade e flexibilidade"),
    14: ("aderência a regras e processos", "inovação e criatividade"),
    15: ("visão de futuro e planejamento", "foco no presente e ação imediata"),
    16: ("foco em impacto e transformação", "orientação para resultados financeiros"),
    17: ("otimismo e positividade", "realismo e pragmatismo"),
    18: ("valorização do processo", "foco no objetivo final"),
    19: ("escuta ativa e receptividade", "expressão e comunicação ativa"),
    20: ("ambição e busca por crescimento", "tranquilidade e satisfação"),
    21: ("discrição e introspecção", "transparência e abertura"),
    22: ("tolerância e compreensão", "exigência e rigor"),
    23: ("aprendizado independente", "aprendizado estruturado"),
    24: ("foco no cliente e suas necessidades", "foco nos objetivos organizacionais"),
    25: ("proatividade e iniciativa", "reatividade e resposta a demandas"),
    26: ("orientação para resultados", "orientação para processos"),
    27: ("extroversão e sociabilidade", "introversão e reflexão"),
    28: ("informalidade e descontração", "atenção e formalidade"),
    29: ("inovação e mudança", "tradição e estabilidade"),
    30: ("dedicação intensa ao trabalho", "equilíbrio e relaxamento"),
    31: ("flexibilidade e despreocupação", "precisão e atenção aos detalhes"),
    32: ("criatividade e fluidez", "ordem e perfeição"),
    33: ("organização e estrutura", "flexibilidade e adaptabilidade"),
    34: ("ação rápida e instintiva", "ponderação e análise"),
    35: ("rigor e disciplina", "leveza e descontração"),
}

TRAIT_DESCRIPTIONS = {
    1: ("abordagem analítica e objetiva", "foco em relacionamentos e pessoas"),
    2: ("priorização da qualidade e precisão", "ênfase em velocidade e resultados rápidos"),
    3: ("autonomia e trabalho independente", "colaboração e sinergia em equipe"),
    4: ("tato diplomático e cautela", "comunicação direta e assertiva"),
    5: ("estabilidade e previsibilidade", "inovação e mudança"),
    6: ("demonstra forte lealdade e comprometimento", "prioriza abordagens práticas e resultados"),
    7: ("disposição para explorar novas possibilidades", "preferência por decisões seguras"),
    8: ("comunicação direta e assertiva", "abordagem modesta e colaborativa"),
    9: ("foco em execução rápida", "ênfase em análise detalhada"),
    10: ("decisões baseadas em intuição e emoção", "abordagem racional e analítica"),
    11: ("habilidade de seguir e implementar", "capacidade de liderar e direcionar"),
    12: ("capacidade de adaptação a mudanças", "preferência por estabilidade"),
    13: ("abordagem sistemática e organizada", "flexibilidade e adaptabilidade"),
    14: ("valorização de estruturas e regras", "busca por inovação e mudança"),
    15: ("planejamento e visão de longo prazo", "foco em ações e resultados imediatos"),
    16: ("priorização de impacto social", "foco em resultados financeiros"),
    17: ("visão positiva e otimista", "abordagem realista e prática"),
    18: ("valorização do processo de desenvolvimento", "foco em objetivos finais"),
    19: ("habilidade de escuta e compreensão", "capacidade de comunicação e expressão"),
    20: ("busca constante por crescimento", "satisfação com o estado atual"),
    21: ("preferência por discrição", "abertura e transparência"),
    22: ("abordagem compreensiva e tolerante", "postura exigente e rigorosa"),
    23: ("preferência por autoaprendizagem", "valorização de estruturas formais"),
    24: ("priorização das necessidades do cliente", "foco em objetivos organizacionais"),
    25: ("iniciativa e antecipação", "resposta a demandas estabelecidas"),
    26: ("foco em alcançar objetivos", "aderência a processos estabelecidos"),
    27: ("facilidade com interações sociais", "preferência por reflexão individual"),
    28: ("abordagem casual e relaxada", "atenção e formalidade"),
    29: ("busca por inovação e mudança", "valorização de métodos estabelecidos"),
    30: ("alta dedicação e comprometimento", "busca por equilíbrio trabalho-vida"),
    31: ("flexibilidade com detalhes", "atenção minuciosa à precisão"),
    32: ("aceitação de fluidez e mudança", "busca por ordem e perfeição"),
    33: ("preferência por estrutura e organização", "adaptabilidade a ambientes dinâmicos"),
    34: ("tomada de decisão rápida e intuitiva", "análise cuidadosa antes da ação"),
    35: ("disciplina e rigor metodológico", "abordagem leve e flexível"),
}

PROFILE_PATTERNS = {
    "collaborative": {
        "primary": "Com base na análise realizada, seus principais traços comportamentais incluem uma forte tendência para colaboração em equipe",
        "variations": [
            "demonstrando particular facilidade para trabalho em grupo e construção de relacionamentos profissionais",
            "com ênfase especial na capacidade de integrar e fortalecer equipes",
            "destacando-se na habilidade de promover cooperação e sinergia no ambiente profissional",
        ],
    },
    "analytical": {
        "primary": "Sua análise demonstra uma orientação predominantemente analítica",
        "variations": [
            "com forte inclinação para abordagens estruturadas e baseadas em dados",
            "evidenciando capacidade superior de análise e pensamento sistemático",
            "demonstrando particular aptidão para avaliação detalhada e tomada de decisão fundamentada",
        ],
    },
    "strategic": {
        "primary": "Seu perfil indica uma forte orientação estratégica",
        "variations": [
            "com notável capacidade de planejamento e visão de longo prazo",
            "demonstrando habilidade natural para pensar sistematicamente",
            "evidenciando aptidão para análise e planejamento estratégico",
        ],
    },
    "innovative": {
        "primary": "Sua análise revela um perfil marcadamente inovador",
        "variations": [
            "com forte capacidade de gerar novas ideias e soluções criativas",
            "demonstrando natural aptidão para inovação e pensamento original",
            "evidenciando habilidade especial para abordagens não convencionais",
        ],
    },
}
