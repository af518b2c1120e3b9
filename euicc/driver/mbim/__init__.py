"""MBIM codes, statuses, messages, commands and the mbim-proxy channel."""