from brandplot.services.missions import analyst, copywriter, designer, social_media

# Mission number -> generator module (validate / generate)
MISSIONS = {
    2: copywriter,
    3: designer,
    4: social_media,
    5: analyst,
}

LOG_TAGS = {
    2: "[MISSAO 2] Erro ao gerar copy",
    3: "[MISSAO 3] Falha ao processar requisição",
    4: "[MISSAO 4] Erro ao gerar conteúdo",
    5: "[MISSAO 5] Falha ao gerar analise",
}
