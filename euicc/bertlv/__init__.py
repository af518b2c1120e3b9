"""BER-TLV tags, length octets, trees and primitive value codecs."""