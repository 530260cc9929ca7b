"""Static reply texts (Spanish, as seen by chat users)."""

WELCOME = "Soy YummyEcho, repito los mensajes para ayudarte."

HELP = """Comandos disponibles:

En privado:
/start — Registrarte con el bot
/solicitar_activacion — Obtener tu ID para que un administrador te active
/reporte <texto> — Enviar un reporte al grupo (también con foto o video y el texto "/reporte ..." como descripción)

En el grupo (solo administradores):
/clave <contraseña> — Activar el grupo
/activar <id> — Activar a un usuario
/eco <minutos> <mensaje> — Repetir un mensaje cada N minutos
/eco_stop — Detener el eco
/cadena <mensaje> — Enviar un mensaje privado a todos los usuarios"""

GROUP_REGISTERED = (
    "¡Hola a todos! Gracias por añadirme. He guardado el ID de este grupo "
    "para mis tareas programadas."
)

# ── Gate ─────────────────────────────────────────────────
USER_NOT_ACTIVATED = (
    "Tu cuenta aún no está activada. Usa /solicitar_activacion para obtener tu ID "
    "y pide a un administrador del grupo que te active."
)
GROUP_NOT_ACTIVATED = (
    "Este grupo no está activado. Un administrador debe escribir /clave <contraseña> para activarlo."
)

# ── Activation ───────────────────────────────────────────
ADMINS_ONLY = "Solo administradores o propietarios pueden usar este comando."
PRIVILEGE_CHECK_FAILED = "No pude verificar tus permisos en este grupo. Inténtalo de nuevo."
PASSWORD_USAGE = "Uso: /clave <contraseña>"
PASSWORD_NOT_CONFIGURED = "La activación de grupos no está configurada. Contacta al responsable del bot."
PASSWORD_WRONG = "Contraseña incorrecta."
GROUP_ACTIVATED = "✅ Grupo activado correctamente."
GROUP_ALREADY_ACTIVE = "Este grupo ya está activado."
ACTIVATION_STORE_FAILED = "No se pudo guardar la activación. Inténtalo de nuevo más tarde."

ACTIVATION_REQUEST = (
    "Tu ID es {user_id}. Envíalo a un administrador del grupo para que te active con /activar {user_id}."
)
ACTIVATE_USAGE = "Uso: /activar <id_de_usuario>"
USER_ACTIVATED = "✅ Usuario {user_id} activado."
USER_ALREADY_ACTIVE = "El usuario {user_id} ya estaba activado."
USER_ACTIVATED_NOT_NOTIFIED = (
    "⚠️ Usuario {user_id} activado, pero no se le pudo enviar el aviso privado."
)
USER_CONGRATS = "🎉 ¡Felicidades! Tu cuenta ha sido activada. Ya puedes usar todos los comandos."

# ── Echo ─────────────────────────────────────────────────
ECHO_USAGE = "Uso: /eco <minutos> <mensaje>"
ECHO_BAD_INTERVAL = "El intervalo debe ser un número de minutos mayor o igual a 1."
ECHO_STARTED = "Eco activado cada {minutes} minutos: {message}"
ECHO_TICK = "Eco: {message}"
ECHO_STOPPED = "Eco detenido."
ECHO_NONE = "No hay eco activo en este grupo."

# ── Broadcast ────────────────────────────────────────────
BROADCAST_USAGE = "Uso: /cadena <mensaje>"
BROADCAST_BODY = "MENSAJE: {message}"
BROADCAST_DONE = "Mensaje enviado a {count} usuarios en privado."

# ── Reports ──────────────────────────────────────────────
PRIVATE_ONLY = "Este comando solo puede usarse en privado."
NO_GROUP_REGISTERED = "No hay grupo registrado para enviar el reporte."
REPORT_USAGE = "Envía tu reporte junto al comando /reporte, en un mensaje."
REPORT_HEADER = "Reporte de @{user}:"
REPORT_TEXT_SENT = "Tu reporte de texto ha sido enviado con éxito."
REPORT_PHOTO_SENT = "Tu reporte con imagen ha sido enviado con éxito."
REPORT_VIDEO_SENT = "Tu reporte con video ha sido enviado con éxito."
